# introbot/schemas/interaction.py

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .profile import IntroForm
from ..errors import InvalidControl


class ControlAction(str, Enum):
    UPDATE = "update_intro"
    DELETE = "delete_intro"
    CONFIRM_DELETE = "confirm_delete_intro"
    CANCEL_DELETE = "cancel_delete_intro"


class ControlPayload(BaseModel):
    """
    ボタンの custom_id に埋め込む型付きペイロード。

    custom_id は 100 文字制限があるので短いキー（a / u / t）で JSON 化する。
    """

    action: ControlAction = Field(alias="a")
    user_id: str = Field(alias="u", min_length=1)
    # 確認ボタンだけが持つ（ConfirmationGate のトークン）
    token: Optional[str] = Field(default=None, alias="t")

    model_config = ConfigDict(populate_by_name=True)

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def decode(cls, custom_id: str) -> "ControlPayload":
        try:
            return cls.model_validate_json(custom_id)
        except ValidationError as e:
            raise InvalidControl(f"malformed control id {custom_id!r}: {e}") from e


class ControlPress(BaseModel):
    """POST /api/interactions/controls 用（ボタン押下）"""
    custom_id: str
    user_id: str = Field(min_length=1)


class ButtonOut(BaseModel):
    custom_id: str
    label: str
    style: Literal["primary", "secondary", "danger"]
    emoji: Optional[str] = None


class InteractionReply(BaseModel):
    """ボタン押下に対する応答（本人にだけ見える）"""
    content: str
    ephemeral: bool = True
    # stale: 既に解決済み / 期限切れの確認ボタン
    status: Literal["ok", "prompt", "form", "stale"] = "ok"
    components: list[ButtonOut] = []
    form: Optional[IntroForm] = None


class SetupUpdate(BaseModel):
    """PUT /api/setup 用"""
    profile_channel_id: Optional[str] = None
    intro_channel_id: Optional[str] = None
    moderator_role_id: Optional[str] = None


class SetupOut(BaseModel):
    profile_channel_id: Optional[str]
    intro_channel_id: Optional[str]
    moderator_role_id: Optional[str]
    setup_complete: bool
    generator_enabled: bool
