# introbot/schemas/profile.py

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.profile import NOT_PROVIDED

FORM_FIELDS = ("name", "role", "institution", "interests", "details")


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    BUILDER = "Builder"
    PRO = "Pro"

    @classmethod
    def coerce(cls, value) -> "ExperienceLevel":
        """3種類以外は Beginner に寄せる"""
        for level in cls:
            if value == level.value:
                return level
        return cls.BEGINNER


class IntroForm(BaseModel):
    """自己紹介フォームの入力値（未入力は "not provided"）"""

    name: str = NOT_PROVIDED
    role: str = NOT_PROVIDED
    institution: str = NOT_PROVIDED
    interests: str = NOT_PROVIDED
    details: str = NOT_PROVIDED

    model_config = ConfigDict(from_attributes=True)

    @field_validator(*FORM_FIELDS, mode="before")
    @classmethod
    def _blank_to_sentinel(cls, v):
        if v is None:
            return NOT_PROVIDED
        if isinstance(v, str) and not v.strip():
            return NOT_PROVIDED
        return v.strip() if isinstance(v, str) else v

    def is_provided(self, field: str) -> bool:
        return getattr(self, field) != NOT_PROVIDED


class IntroSubmit(BaseModel):
    """POST /api/intros 用（モーダル送信）"""
    # 空文字はボタンの custom_id に埋め込めないので入口で弾く
    user_id: str = Field(min_length=1)
    form: IntroForm = IntroForm()


class ProfileOut(BaseModel):
    """レスポンス用"""
    user_id: str
    artifact_id: Optional[str]
    name: str
    role: str
    institution: str
    interests: str
    details: str
    summary: str
    experience_level: ExperienceLevel
    skills: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class IntroReply(BaseModel):
    """フォーム送信後に本人へ返すメッセージ"""
    content: str
    ephemeral: bool = True
    profile: ProfileOut
    used_fallback: bool = False
