# introbot/services/lifecycle.py
"""
プロフィールのライフサイクル（作成 / 更新 / 削除）。

状態はユーザーごとに2つだけ:
- NoProfile: レコード無し
- Published: レコード有り（artifact_id が唯一の投稿）

削除は ConfirmationGate を挟む（Published → 確認待ち → NoProfile / Published）。
ユーザー単位のロックは取らない。同じユーザーの同時更新は最後の投稿が勝つ。
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import (
    ChannelNotConfigured,
    ChannelUnreachable,
    OwnershipError,
    ProfileInconsistent,
    ProfileNotFound,
    ProfileStoreUnavailable,
    PublishFailed,
)
from ..models.profile import ProfileRecord
from ..schemas.interaction import (
    ButtonOut,
    ControlAction,
    ControlPayload,
    InteractionReply,
)
from ..schemas.profile import IntroForm
from .channel import ChannelHandle
from .confirmation import ConfirmationGate, GateResolution
from .publisher import ArtifactPublisher, level_emoji
from .store import ProfileStore
from .summary import ContentGenerator, SummaryResult

logger = logging.getLogger(__name__)


@dataclass
class IntroOutcome:
    record: ProfileRecord
    result: SummaryResult
    channel: ChannelHandle
    created: bool

    @property
    def message(self) -> str:
        level = self.result.experience_level
        emoji = level_emoji(level)
        return (
            "✅ **Your introduction has been posted!**\n\n"
            f"📋 Check it out in {self.channel.mention()}\n"
            f"{emoji} Experience Level: **{level.value}**\n\n"
            "You can update or delete your intro anytime using the buttons below it."
        )


class LifecycleOrchestrator:
    def __init__(
        self,
        store: ProfileStore,
        content: ContentGenerator,
        publisher: ArtifactPublisher,
        gate: ConfirmationGate,
    ):
        self.store = store
        self.content = content
        self.publisher = publisher
        self.gate = gate

    # -----------------------------
    # 共通チェック
    # -----------------------------
    def _check_owner(self, acting_user_id: str, control: ControlPayload) -> None:
        if acting_user_id != control.user_id:
            logger.info(
                f"User {acting_user_id} pressed {control.action.value} "
                f"owned by {control.user_id}; rejected"
            )
            if control.action == ControlAction.UPDATE:
                raise OwnershipError(user_message="You can only update your own introduction.")
            raise OwnershipError(user_message="You can only delete your own introduction.")

    def _check_configured(self) -> None:
        try:
            self.publisher.channel_id()
        except ChannelNotConfigured:
            logger.error("Profile channel is not configured")
            raise

    def _load(self, user_id: str) -> Optional[ProfileRecord]:
        try:
            return self.store.get(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load profile for user {user_id}: {e}")
            raise ProfileStoreUnavailable(f"profile {user_id} could not be read") from e

    def _retract_quietly(self, user_id: str, artifact_id: Optional[str]) -> None:
        result = self.publisher.retract(artifact_id)
        if result.ok:
            logger.info(f"Retracted message {artifact_id} for user {user_id}")
        else:
            # 残った古い投稿は見た目だけの問題なので続行
            logger.warning(
                f"Could not retract message {artifact_id} for user {user_id}: {result.reason}"
            )

    # -----------------------------
    # 作成 / 更新（フォーム送信）
    # -----------------------------
    def submit_intro(self, user_id: str, form: IntroForm) -> IntroOutcome:
        self._check_configured()

        try:
            handle = self.publisher.resolve_channel()
        except ChannelUnreachable as e:
            logger.error(f"Failed to fetch profile channel: {e}")
            raise

        logger.info(f"Processing introduction from user {user_id}")
        result = self.content.generate_summary(form)
        if result.used_fallback:
            logger.warning(f"AI processing failed for user {user_id}, using fallback")

        existing = self._load(user_id)
        if existing is not None and existing.artifact_id:
            self._retract_quietly(user_id, existing.artifact_id)

        rendered = self.publisher.render(user_id, form, result)
        try:
            artifact_id = self.publisher.publish(user_id, rendered)
        except (ChannelNotConfigured, ChannelUnreachable, PublishFailed) as e:
            logger.error(f"Failed to send profile message for user {user_id}: {e}")
            if existing is not None:
                # 古いレコードはそのまま（古い投稿の復元はしない）
                raise PublishFailed(
                    str(e),
                    user_message=(
                        "Failed to post your updated profile. "
                        "Please contact an admin."
                    ),
                ) from e
            raise

        try:
            record = self.store.save(
                user_id,
                artifact_id,
                form,
                result.summary,
                result.experience_level,
                result.skills,
            )
        except SQLAlchemyError as e:
            # 投稿はやり直さない。手動対応用に artifact_id を残す
            logger.error(
                f"Message {artifact_id} posted for user {user_id} but the profile "
                f"could not be saved: {e}"
            )
            raise ProfileInconsistent(
                f"artifact {artifact_id} published for {user_id} but not saved"
            ) from e

        logger.info(
            f"Profile {'created' if existing is None else 'updated'} for user {user_id} "
            f"- {result.experience_level.value}"
        )
        return IntroOutcome(record=record, result=result, channel=handle, created=existing is None)

    # -----------------------------
    # 更新ボタン
    # -----------------------------
    def request_update(self, acting_user_id: str, control: ControlPayload) -> InteractionReply:
        self._check_owner(acting_user_id, control)
        self._check_configured()

        record = self._load(control.user_id)
        if record is None:
            raise ProfileNotFound(f"no profile for user {control.user_id}")

        return InteractionReply(
            content="📝 Update your introduction",
            status="form",
            form=IntroForm.model_validate(record),
        )

    # -----------------------------
    # 削除ボタン → 確認 / キャンセル
    # -----------------------------
    def request_delete(self, acting_user_id: str, control: ControlPayload) -> InteractionReply:
        self._check_owner(acting_user_id, control)
        self._check_configured()

        record = self._load(control.user_id)
        if record is None:
            raise ProfileNotFound(f"no profile for user {control.user_id}")

        pending = self.gate.open(control.user_id)
        confirm = ControlPayload(
            action=ControlAction.CONFIRM_DELETE,
            user_id=control.user_id,
            token=pending.token,
        )
        cancel = ControlPayload(
            action=ControlAction.CANCEL_DELETE,
            user_id=control.user_id,
            token=pending.token,
        )
        return InteractionReply(
            content="⚠️ Are you sure you want to delete your introduction? This cannot be undone.",
            status="prompt",
            components=[
                ButtonOut(custom_id=confirm.encode(), label="Yes, Delete", style="danger"),
                ButtonOut(custom_id=cancel.encode(), label="Cancel", style="secondary"),
            ],
        )

    def _resolve_gate(self, acting_user_id: str, control: ControlPayload) -> Optional[InteractionReply]:
        resolution = self.gate.resolve(control.token, acting_user_id)
        if resolution == GateResolution.NOT_OWNER:
            raise OwnershipError(user_message="You can only delete your own introduction.")
        if resolution == GateResolution.STALE:
            return InteractionReply(
                content="This confirmation is no longer active.",
                status="stale",
            )
        return None

    def confirm_delete(self, acting_user_id: str, control: ControlPayload) -> InteractionReply:
        self._check_owner(acting_user_id, control)
        self._check_configured()

        # 読み込み失敗でトークンを消費しないよう、ゲートより先に読む
        record = self._load(control.user_id)

        stale = self._resolve_gate(acting_user_id, control)
        if stale is not None:
            return stale

        if record is None:
            raise ProfileNotFound(f"no profile for user {control.user_id}")

        self._retract_quietly(control.user_id, record.artifact_id)

        try:
            self.store.delete(control.user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete profile for user {control.user_id}: {e}")
            raise ProfileInconsistent(
                f"profile {control.user_id} retracted but not deleted",
                user_message="Failed to delete your introduction. Please contact an admin.",
            ) from e

        logger.info(f"Deleted intro for user {control.user_id}")
        return InteractionReply(content="✅ Your introduction has been deleted.")

    def cancel_delete(self, acting_user_id: str, control: ControlPayload) -> InteractionReply:
        self._check_owner(acting_user_id, control)

        stale = self._resolve_gate(acting_user_id, control)
        if stale is not None:
            return stale
        return InteractionReply(content="✅ Deletion cancelled.")

    # -----------------------------
    # ボタン押下の振り分け
    # -----------------------------
    def handle_control(self, acting_user_id: str, custom_id: str) -> InteractionReply:
        control = ControlPayload.decode(custom_id)
        handlers = {
            ControlAction.UPDATE: self.request_update,
            ControlAction.DELETE: self.request_delete,
            ControlAction.CONFIRM_DELETE: self.confirm_delete,
            ControlAction.CANCEL_DELETE: self.cancel_delete,
        }
        return handlers[control.action](acting_user_id, control)
