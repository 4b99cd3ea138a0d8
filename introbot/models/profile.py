# introbot/models/profile.py

from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime

from ..db import Base

NOT_PROVIDED = "not provided"
NOT_SPECIFIED = "not specified"


class ProfileRecord(Base):
    __tablename__ = "profile_records"

    # チャットプラットフォーム側のユーザーID（1ユーザー1レコード）
    user_id = Column(String, primary_key=True, index=True)
    # 現在投稿中のメッセージID（未投稿なら None）
    artifact_id = Column(String, nullable=True)

    name = Column(String, nullable=False, default=NOT_PROVIDED)
    role = Column(String, nullable=False, default=NOT_PROVIDED)
    institution = Column(String, nullable=False, default=NOT_PROVIDED)
    interests = Column(Text, nullable=False, default=NOT_PROVIDED)
    details = Column(Text, nullable=False, default=NOT_PROVIDED)

    summary = Column(Text, nullable=False)
    experience_level = Column(String, nullable=False, default="Beginner")
    skills = Column(Text, nullable=False, default=NOT_SPECIFIED)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
