# introbot/services/generator.py
"""
生成 AI（Gemini）クライアント。

起動時に build_generator() で一度だけ組み立て、LifecycleOrchestrator に渡す。
API キーが無い・SDK 初期化に失敗した場合は UnavailableGenerator を使う
（グローバル変数に None を入れておくやり方はしない）。
"""

import logging
from typing import Protocol

from google import genai

from ..config import Settings
from ..errors import GeneratorConfigError, GeneratorUnavailable

logger = logging.getLogger(__name__)


class Generator(Protocol):
    def complete(self, prompt: str) -> str:
        ...


class GeminiGenerator:
    def __init__(self, api_key: str | None, model: str = "gemini-2.5-flash"):
        if not api_key:
            raise GeneratorConfigError("GEMINI_API_KEY is not set")
        try:
            self._client = genai.Client(api_key=api_key)
        except Exception as e:
            raise GeneratorConfigError(f"Failed to initialize Gemini client: {e}") from e
        self.model = model

    def complete(self, prompt: str) -> str:
        try:
            resp = self._client.models.generate_content(
                model=self.model,
                contents=[prompt],
            )
        except Exception as e:
            raise GeneratorUnavailable(f"Gemini request failed: {e}") from e

        text = getattr(resp, "text", None)
        if not text:
            cand = (getattr(resp, "candidates", None) or [None])[0]
            if cand is not None:
                content = getattr(cand, "content", cand)
                parts = getattr(content, "parts", None)
                if parts:
                    text = getattr(parts[0], "text", None)
        return text or ""


class UnavailableGenerator:
    """初期化に失敗したときの代替。呼ぶと必ず GeneratorUnavailable"""

    def __init__(self, reason: str):
        self.reason = reason

    def complete(self, prompt: str) -> str:
        raise GeneratorUnavailable(self.reason)


def build_generator(settings: Settings) -> Generator:
    try:
        generator = GeminiGenerator(settings.gemini_api_key, settings.gemini_model)
    except GeneratorConfigError as e:
        logger.warning(f"Gemini AI disabled: {e}")
        return UnavailableGenerator(str(e))
    logger.info(f"Gemini AI initialized (model={settings.gemini_model})")
    return generator


def is_enabled(generator: Generator) -> bool:
    return not isinstance(generator, UnavailableGenerator)
