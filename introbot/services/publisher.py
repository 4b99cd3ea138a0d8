# introbot/services/publisher.py

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import ConfigStore
from ..errors import ChannelError, ChannelNotConfigured, ChannelUnreachable
from ..schemas.interaction import ControlAction, ControlPayload
from ..schemas.profile import ExperienceLevel, IntroForm
from .channel import Channel, ChannelHandle
from .summary import SummaryResult

logger = logging.getLogger(__name__)

LEVEL_COLORS = {
    ExperienceLevel.BEGINNER: 0x00FF7F,
    ExperienceLevel.BUILDER: 0xFFD700,
    ExperienceLevel.PRO: 0xFF0000,
}
LEVEL_EMOJIS = {
    ExperienceLevel.BEGINNER: "🟢",
    ExperienceLevel.BUILDER: "🟡",
    ExperienceLevel.PRO: "🔴",
}
DEFAULT_COLOR = 0x4A90E2
DEFAULT_EMOJI = "🔵"

# Discord のコンポーネント定義値
ACTION_ROW = 1
BUTTON = 2
STYLE_PRIMARY = 1
STYLE_SECONDARY = 2
STYLE_DANGER = 4


def level_color(level) -> int:
    return LEVEL_COLORS.get(level, DEFAULT_COLOR)


def level_emoji(level) -> str:
    return LEVEL_EMOJIS.get(level, DEFAULT_EMOJI)


@dataclass(frozen=True)
class RetractResult:
    """古い投稿の削除結果。失敗しても呼び出し側はログだけ出して続行する"""
    ok: bool
    artifact_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def done(cls, artifact_id: str) -> "RetractResult":
        return cls(ok=True, artifact_id=artifact_id)

    @classmethod
    def failed(cls, artifact_id: Optional[str], reason: str) -> "RetractResult":
        return cls(ok=False, artifact_id=artifact_id, reason=reason)


class ArtifactPublisher:
    def __init__(self, channel: Channel, config: ConfigStore, community: str = "AI Learners India"):
        self.channel = channel
        self.config = config
        self.community = community

    # -----------------------------
    # チャンネル解決（キャッシュしない）
    # -----------------------------
    def channel_id(self) -> str:
        channel_id = self.config.profile_channel_id()
        if not channel_id:
            raise ChannelNotConfigured("profile channel id is not set")
        return channel_id

    def resolve_channel(self) -> ChannelHandle:
        return self.channel.resolve(self.channel_id())

    # -----------------------------
    # 描画
    # -----------------------------
    def render(self, user_id: str, form: IntroForm, result: SummaryResult) -> dict[str, Any]:
        level = result.experience_level
        emoji = level_emoji(level)

        fields = [
            {"name": "🎓 Name", "value": form.name, "inline": True},
            {"name": "💼 Role / Study", "value": form.role, "inline": True},
            {"name": "📊 Experience", "value": f"{emoji} {level.value}", "inline": True},
        ]
        if form.is_provided("institution"):
            fields.append({"name": "🏫 Institution", "value": form.institution, "inline": True})
        fields += [
            {"name": "🤖 Interests", "value": form.interests, "inline": False},
            {"name": "🧠 Skills", "value": result.skills, "inline": False},
        ]

        embed = {
            "color": level_color(level),
            "title": f"{emoji} Member Introduction",
            "description": f"<@{user_id}>\n\n{result.summary}",
            "fields": fields,
            "footer": {"text": f"Verified by {self.community} Bot 🤖"},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        buttons = [
            {
                "type": BUTTON,
                "style": STYLE_PRIMARY,
                "label": "Update Intro",
                "emoji": {"name": "🔁"},
                "custom_id": ControlPayload(action=ControlAction.UPDATE, user_id=user_id).encode(),
            },
            {
                "type": BUTTON,
                "style": STYLE_DANGER,
                "label": "Delete Intro",
                "emoji": {"name": "🗑️"},
                "custom_id": ControlPayload(action=ControlAction.DELETE, user_id=user_id).encode(),
            },
        ]

        return {
            "embeds": [embed],
            "components": [{"type": ACTION_ROW, "components": buttons}],
        }

    # -----------------------------
    # 投稿・削除
    # -----------------------------
    def publish(self, user_id: str, rendered: dict[str, Any]) -> str:
        """ChannelNotConfigured / ChannelUnreachable / PublishFailed はそのまま上へ"""
        handle = self.resolve_channel()
        artifact_id = self.channel.send(handle, rendered)
        logger.info(f"Published profile for user {user_id} as message {artifact_id}")
        return artifact_id

    def retract(self, artifact_id: Optional[str]) -> RetractResult:
        if not artifact_id:
            return RetractResult.failed(artifact_id, "no artifact to retract")
        try:
            handle = self.resolve_channel()
            artifact = self.channel.fetch_message(handle, artifact_id)
            self.channel.delete_message(artifact)
        except (ChannelError, ChannelNotConfigured, ChannelUnreachable) as e:
            return RetractResult.failed(artifact_id, str(e))
        return RetractResult.done(artifact_id)
