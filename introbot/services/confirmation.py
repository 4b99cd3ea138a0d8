# introbot/services/confirmation.py

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingConfirmation:
    token: str
    user_id: str
    created_at: float
    expires_at: float


class GateResolution(str, Enum):
    ACCEPTED = "accepted"
    STALE = "stale"
    NOT_OWNER = "not_owner"


class ConfirmationGate:
    """
    削除確認（確認 / キャンセル）の一時状態。

    - 永続化しない（プロセス内だけ）
    - 期限付き（ttl_seconds）。期限切れ・解決済みのトークンは STALE
    - 最初に resolve された時点でエントリを消すので、確認とキャンセルは排他
    """

    def __init__(self, ttl_seconds: int = 900, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._pending: dict[str, PendingConfirmation] = {}
        self._lock = threading.Lock()

    def open(self, user_id: str) -> PendingConfirmation:
        now = self._clock()
        pending = PendingConfirmation(
            token=uuid.uuid4().hex,
            user_id=user_id,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            self._purge_expired(now)
            self._pending[pending.token] = pending
        return pending

    def resolve(self, token: str | None, acting_user_id: str) -> GateResolution:
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            pending = self._pending.pop(token, None) if token else None

        if pending is None:
            return GateResolution.STALE
        if pending.user_id != acting_user_id:
            logger.info(
                f"Confirmation {pending.token} for user {pending.user_id} "
                f"pressed by {acting_user_id}; discarded"
            )
            return GateResolution.NOT_OWNER
        return GateResolution.ACCEPTED

    def pending_count(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._pending)

    def _purge_expired(self, now: float) -> None:
        expired = [t for t, p in self._pending.items() if p.expires_at <= now]
        for token in expired:
            del self._pending[token]
