# tests/test_setup.py

from fastapi.testclient import TestClient

from introbot.config import ConfigStore, Settings

from conftest import INTRO_CHANNEL, PROFILE_CHANNEL


def test_get_setup_reports_configuration(client: TestClient):
    res = client.get("/api/setup")
    assert res.status_code == 200

    body = res.json()
    assert body["profile_channel_id"] == PROFILE_CHANNEL
    assert body["intro_channel_id"] == INTRO_CHANNEL
    assert body["setup_complete"] is True
    # ScriptedGenerator は UnavailableGenerator ではない
    assert body["generator_enabled"] is True


def test_put_setup_updates_only_given_fields(client: TestClient, config_store):
    res = client.put("/api/setup", json={"moderator_role_id": "777"})
    assert res.status_code == 200

    body = res.json()
    assert body["moderator_role_id"] == "777"
    assert body["profile_channel_id"] == PROFILE_CHANNEL
    assert config_store.load().moderator_role_id == "777"


def test_file_value_wins_over_environment(tmp_path):
    store = ConfigStore(tmp_path / "cfg.json", Settings(profile_channel_id="from-env"))
    assert store.profile_channel_id() == "from-env"
    assert store.is_setup_complete() is False

    store.update(profile_channel_id="from-file", intro_channel_id="intro")
    assert store.profile_channel_id() == "from-file"
    assert store.is_setup_complete() is True


def test_broken_config_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json", encoding="utf-8")

    store = ConfigStore(path, Settings())
    assert store.profile_channel_id() is None


class ClosingChannel:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_shutdown_closes_channel_client(monkeypatch):
    from introbot.main import app

    closing = ClosingChannel()
    monkeypatch.setattr(app.state, "channel", closing)

    with TestClient(app):
        assert closing.closed is False

    assert closing.closed is True
