# introbot/config.py

import json
import logging
import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    database_url: str = "sqlite:///./introbot.db"

    discord_token: Optional[str] = None
    discord_api_base: str = "https://discord.com/api/v10"

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    # 環境変数側のフォールバック値（bot_config.json が優先）
    profile_channel_id: Optional[str] = None
    intro_channel_id: Optional[str] = None

    bot_config_path: str = "bot_config.json"
    confirmation_ttl_seconds: int = 900
    community_name: str = "AI Learners India"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """.env を読み込んでから環境変数で Settings を組み立てる"""
        load_dotenv()
        values = {}
        for field_name in cls.model_fields:
            raw = os.getenv(field_name.upper())
            if raw not in (None, ""):
                values[field_name] = raw
        # Discord 側では TOKEN という名前でも渡される
        if "discord_token" not in values and os.getenv("TOKEN"):
            values["discord_token"] = os.getenv("TOKEN")
        return cls(**values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


class BotConfig(BaseModel):
    profile_channel_id: Optional[str] = None
    intro_channel_id: Optional[str] = None
    moderator_role_id: Optional[str] = None


class ConfigStore:
    """
    /setup で保存されるチャンネル設定（JSON ファイル）。

    - ファイルの値が優先、無ければ環境変数（Settings）にフォールバック
    - 毎回ファイルを読み直す（チャンネルの付け替えにそのまま追従する）
    """

    def __init__(self, path: str | Path, settings: Optional[Settings] = None):
        self.path = Path(path)
        self.settings = settings or Settings()
        self._lock = threading.Lock()

    def load(self) -> BotConfig:
        if not self.path.exists():
            return BotConfig()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return BotConfig.model_validate(data)
        except (OSError, ValueError) as e:
            # pydantic の ValidationError も ValueError
            logger.error(f"Failed to read bot config {self.path}: {e}")
            return BotConfig()

    def save(self, config: BotConfig) -> BotConfig:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                config.model_dump_json(indent=2),
                encoding="utf-8",
            )
        logger.info(f"Bot config saved to {self.path}")
        return config

    def update(self, **changes) -> BotConfig:
        current = self.load()
        merged = current.model_copy(
            update={k: v for k, v in changes.items() if v is not None}
        )
        return self.save(merged)

    def profile_channel_id(self) -> Optional[str]:
        return self.load().profile_channel_id or self.settings.profile_channel_id

    def intro_channel_id(self) -> Optional[str]:
        return self.load().intro_channel_id or self.settings.intro_channel_id

    def is_setup_complete(self) -> bool:
        return bool(self.profile_channel_id() and self.intro_channel_id())
