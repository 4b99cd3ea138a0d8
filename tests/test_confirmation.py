# tests/test_confirmation.py

import pytest

from introbot.errors import InvalidControl
from introbot.schemas.interaction import ControlAction, ControlPayload
from introbot.services.confirmation import ConfirmationGate, GateResolution


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


# -----------------------------
# ボタンのペイロード
# -----------------------------
def test_control_payload_roundtrip_and_length():
    payload = ControlPayload(
        action=ControlAction.CONFIRM_DELETE,
        user_id="123456789012345678",
        token="f" * 32,
    )
    encoded = payload.encode()

    # Discord の custom_id は 100 文字まで
    assert len(encoded) <= 100
    assert ControlPayload.decode(encoded).model_dump() == payload.model_dump()


def test_control_payload_without_token_omits_key():
    encoded = ControlPayload(action=ControlAction.UPDATE, user_id="42").encode()
    assert '"t"' not in encoded
    assert ControlPayload.decode(encoded).token is None


@pytest.mark.parametrize(
    "custom_id",
    [
        "update_intro_42",                 # 旧形式（文字列分割前提）は受け付けない
        '{"a": "explode_intro", "u": "42"}',
        '{"a": "update_intro"}',
        '{"a": "update_intro", "u": ""}',
        "",
    ],
)
def test_malformed_control_is_rejected(custom_id):
    with pytest.raises(InvalidControl):
        ControlPayload.decode(custom_id)


# -----------------------------
# ConfirmationGate
# -----------------------------
def test_confirm_once_then_stale():
    gate = ConfirmationGate()
    pending = gate.open("alice")

    assert gate.resolve(pending.token, "alice") == GateResolution.ACCEPTED
    # 2回目（リプレイ）は STALE
    assert gate.resolve(pending.token, "alice") == GateResolution.STALE
    assert gate.pending_count() == 0


def test_other_user_is_rejected_and_entry_discarded():
    gate = ConfirmationGate()
    pending = gate.open("alice")

    assert gate.resolve(pending.token, "mallory") == GateResolution.NOT_OWNER
    # 持ち主でも、もう使えない
    assert gate.resolve(pending.token, "alice") == GateResolution.STALE


def test_expired_confirmation_is_stale():
    clock = FakeClock()
    gate = ConfirmationGate(ttl_seconds=60, clock=clock)
    pending = gate.open("alice")

    clock.now += 61
    assert gate.resolve(pending.token, "alice") == GateResolution.STALE


def test_unknown_or_missing_token_is_stale():
    gate = ConfirmationGate()
    assert gate.resolve("does-not-exist", "alice") == GateResolution.STALE
    assert gate.resolve(None, "alice") == GateResolution.STALE


def test_confirmations_are_independent_per_request():
    gate = ConfirmationGate()
    a = gate.open("alice")
    b = gate.open("bob")

    assert a.token != b.token
    assert gate.resolve(b.token, "bob") == GateResolution.ACCEPTED
    assert gate.resolve(a.token, "alice") == GateResolution.ACCEPTED
