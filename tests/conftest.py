# tests/conftest.py
import itertools
import os

# introbot を import する前にテスト用の設定を入れておく
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_introbot.db")
os.environ["GEMINI_API_KEY"] = ""

import pytest
from sqlalchemy.orm import Session
from fastapi.testclient import TestClient

from introbot.config import ConfigStore, Settings
from introbot.db import Base, engine, SessionLocal
from introbot.errors import ArtifactNotFound, ChannelError, ChannelUnreachable, GeneratorUnavailable, PublishFailed
from introbot.main import app
from introbot.api.deps import (
    get_channel,
    get_config_store,
    get_confirmation_gate,
    get_generator,
)
from introbot.services.channel import Artifact, ChannelHandle
from introbot.services.confirmation import ConfirmationGate
from introbot.services.lifecycle import LifecycleOrchestrator
from introbot.services.publisher import ArtifactPublisher
from introbot.services.store import ProfileStore
from introbot.services.summary import ContentGenerator

PROFILE_CHANNEL = "111111111111111111"
INTRO_CHANNEL = "222222222222222222"

GOOD_RESPONSE = '{"summary": "Ravi builds NLP tools.", "experienceLevel": "Builder", "skills": "Python, NLP"}'


# -----------------------------
# テスト用の外部サービス
# -----------------------------
class FakeChannel:
    """メモリ上のチャンネル。messages[channel_id][message_id] = content"""

    def __init__(self, channel_ids=(PROFILE_CHANNEL,)):
        self.messages = {cid: {} for cid in channel_ids}
        self._ids = itertools.count(1000)
        self.fail_send = False
        self.fail_delete = False
        self.resolve_calls = 0
        self.deleted = []

    def resolve(self, channel_id):
        self.resolve_calls += 1
        if channel_id not in self.messages:
            raise ChannelUnreachable(f"unknown channel {channel_id}")
        return ChannelHandle(channel_id=channel_id, name="profiles")

    def send(self, handle, content):
        if self.fail_send:
            raise PublishFailed("send failed")
        message_id = str(next(self._ids))
        self.messages[handle.channel_id][message_id] = content
        return message_id

    def fetch_message(self, handle, artifact_id):
        if artifact_id not in self.messages.get(handle.channel_id, {}):
            raise ArtifactNotFound(f"message {artifact_id} not found")
        return Artifact(channel_id=handle.channel_id, artifact_id=artifact_id)

    def delete_message(self, artifact):
        if self.fail_delete:
            raise ChannelError("delete failed")
        del self.messages[artifact.channel_id][artifact.artifact_id]
        self.deleted.append(artifact.artifact_id)

    def live_ids(self, channel_id=PROFILE_CHANNEL):
        return set(self.messages.get(channel_id, {}))

    def artifacts_for(self, user_id, channel_id=PROFILE_CHANNEL):
        mention = f"<@{user_id}>"
        return [
            mid
            for mid, content in self.messages.get(channel_id, {}).items()
            if content["embeds"][0]["description"].startswith(mention)
        ]


class ScriptedGenerator:
    """
    responses を順番に返す。要素が Exception なら raise する。
    使い切ったら最後の要素を繰り返す。
    """

    def __init__(self, *responses):
        self.responses = list(responses) or [GOOD_RESPONSE]
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        idx = min(len(self.prompts) - 1, len(self.responses) - 1)
        response = self.responses[idx]
        if isinstance(response, Exception):
            raise response
        return response


# -----------------------------
# フィクスチャ
# -----------------------------
@pytest.fixture(scope="function")
def db() -> Session:
    """
    テストごとにクリーンな DB を用意するフィクスチャ。
    アプリ本体と同じ engine を使う。
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def config_store(tmp_path) -> ConfigStore:
    store = ConfigStore(tmp_path / "bot_config.json", Settings())
    store.update(profile_channel_id=PROFILE_CHANNEL, intro_channel_id=INTRO_CHANNEL)
    return store


@pytest.fixture
def unconfigured_store(tmp_path) -> ConfigStore:
    return ConfigStore(tmp_path / "empty_config.json", Settings())


@pytest.fixture
def gate() -> ConfirmationGate:
    return ConfirmationGate(ttl_seconds=900)


def make_orchestrator(db, generator, channel, config_store, gate) -> LifecycleOrchestrator:
    return LifecycleOrchestrator(
        store=ProfileStore(db),
        content=ContentGenerator(generator),
        publisher=ArtifactPublisher(channel, config_store),
        gate=gate,
    )


@pytest.fixture
def orchestrator(db, generator, channel, config_store, gate) -> LifecycleOrchestrator:
    return make_orchestrator(db, generator, channel, config_store, gate)


@pytest.fixture(scope="function")
def client(db, generator, channel, config_store, gate) -> TestClient:
    """
    外部サービス（チャンネル・生成 AI・設定）だけ DI で差し替えた TestClient。
    """
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_channel] = lambda: channel
    app.dependency_overrides[get_config_store] = lambda: config_store
    app.dependency_overrides[get_confirmation_gate] = lambda: gate
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def failing_generator() -> ScriptedGenerator:
    return ScriptedGenerator(GeneratorUnavailable("boom"))
