# introbot/services/store.py

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models.profile import ProfileRecord
from ..schemas.profile import ExperienceLevel, IntroForm


class ProfileStore:
    """1ユーザー1レコードの永続化（user_id がキー）"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[ProfileRecord]:
        return self.db.get(ProfileRecord, user_id)

    def list_all(self) -> list[ProfileRecord]:
        return (
            self.db.query(ProfileRecord)
            .order_by(ProfileRecord.created_at)
            .all()
        )

    def save(
        self,
        user_id: str,
        artifact_id: Optional[str],
        form: IntroForm,
        summary: str,
        experience_level: ExperienceLevel,
        skills: str,
    ) -> ProfileRecord:
        """既存レコードがあれば上書き、無ければ新規作成"""
        record = self.db.get(ProfileRecord, user_id)
        now = datetime.utcnow()
        if record is None:
            record = ProfileRecord(user_id=user_id, created_at=now)

        record.artifact_id = artifact_id
        record.name = form.name
        record.role = form.role
        record.institution = form.institution
        record.interests = form.interests
        record.details = form.details
        record.summary = summary
        record.experience_level = ExperienceLevel(experience_level).value
        record.skills = skills
        record.updated_at = now

        self.db.add(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def delete(self, user_id: str) -> bool:
        record = self.db.get(ProfileRecord, user_id)
        if record is None:
            return False
        self.db.delete(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return True
