# introbot/services/summary.py
"""
自己紹介フォーム → 紹介文・経験レベル・スキルの生成。

フォールバックは2種類あるので混同しないこと。

1. 全体フォールバック: 通信エラー / 空レスポンス / JSON として復元できない
   → テンプレート文・Beginner・"not specified" をまとめて使う
2. 項目ごとのフォールバック: JSON は読めたが summary / skills が空
   → 空だった項目だけテンプレート値で埋める（生成できた分は残す）
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import GeneratorUnavailable
from ..models.profile import NOT_PROVIDED, NOT_SPECIFIED
from ..schemas.profile import ExperienceLevel, IntroForm
from .generator import Generator

logger = logging.getLogger(__name__)

FALLBACK_NAME = "This member"
FALLBACK_INTERESTS = "AI and technology"

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)

PROMPT_TEMPLATE = """You are a friendly AI assistant for the {community} community. Create a casual, natural summary of this member's introduction.

Introduction:
Name: {name}
Role/Study: {role}
Institution: {institution}
Interests: {interests}
Details: {details}

Task:
1. Write a 2-3 sentence casual summary in Hinglish or English (match their input language naturally)
2. Describe who they are, what they're interested in, and what they want to learn/build
3. Keep it conversational and friendly - like introducing someone at a meetup
4. Determine experience level: "Beginner" (just starting), "Builder" (intermediate), or "Pro" (advanced/professional)
5. Extract their skills if mentioned

Return ONLY valid JSON (no markdown):
{{
  "summary": "Casual 2-3 sentence Hinglish/English introduction",
  "experienceLevel": "Beginner",
  "skills": "Extracted skills or {not_specified}"
}}"""


@dataclass(frozen=True)
class SummaryResult:
    summary: str
    experience_level: ExperienceLevel
    skills: str
    used_fallback: bool = False


def build_prompt(form: IntroForm, community: str = "AI Learners India") -> str:
    # 未入力の項目も "not provided" として必ず埋める（項目自体は省略しない）
    values = {
        field: (getattr(form, field) or NOT_PROVIDED)
        for field in ("name", "role", "institution", "interests", "details")
    }
    return PROMPT_TEMPLATE.format(
        community=community,
        not_specified=NOT_SPECIFIED,
        **values,
    )


def fallback_summary(form: IntroForm) -> SummaryResult:
    name = form.name if form.is_provided("name") else FALLBACK_NAME
    interests = form.interests if form.is_provided("interests") else FALLBACK_INTERESTS
    return SummaryResult(
        summary=f"{name} is interested in {interests} and wants to learn and grow in the community.",
        experience_level=ExperienceLevel.BEGINNER,
        skills=NOT_SPECIFIED,
        used_fallback=True,
    )


def recover_json(raw: str) -> Optional[dict[str, Any]]:
    """
    コードフェンスを外し、最初の "{" から最後の "}" までを JSON として読む。
    読めなければ None。
    """
    if not raw or not raw.strip():
        return None
    cleaned = _FENCE_RE.sub("", raw)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        return None
    try:
        parsed = json.loads(cleaned[start:end + 1])
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


class ContentGenerator:
    def __init__(self, generator: Generator, community: str = "AI Learners India"):
        self.generator = generator
        self.community = community

    def generate_summary(self, form: IntroForm) -> SummaryResult:
        """例外は外に出さない。必ず使える結果を返す"""
        fallback = fallback_summary(form)
        prompt = build_prompt(form, self.community)

        try:
            raw = self.generator.complete(prompt)
        except GeneratorUnavailable as e:
            logger.warning(f"AI summary unavailable, using fallback: {e}")
            return fallback
        except Exception as e:
            logger.error(f"Unexpected error from generator, using fallback: {e}")
            return fallback

        parsed = recover_json(raw)
        if parsed is None:
            logger.warning("AI response was empty or not JSON, using fallback")
            return fallback

        level = ExperienceLevel.coerce(parsed.get("experienceLevel"))
        summary = _text(parsed.get("summary")) or fallback.summary
        skills = _text(parsed.get("skills")) or fallback.skills

        logger.info(f"AI summary generated - Level: {level.value}")
        return SummaryResult(
            summary=summary,
            experience_level=level,
            skills=skills,
            used_fallback=False,
        )
