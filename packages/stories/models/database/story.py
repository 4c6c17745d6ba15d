from sqlalchemy import Column, String, DateTime, Text, JSON, Index
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType


class StoryEntity(Base):
    __tablename__ = "stories"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    synopsis = Column(Text, nullable=False)
    initial_text = Column(Text, nullable=False)
    genre = Column(String(50), nullable=True)
    mood = Column(String(50), nullable=True)
    setting = Column(String(200), nullable=True)
    age_rating = Column(String(20), nullable=False, index=True)

    # [{id, description, completed}]
    objectives = Column(JSON, nullable=False, server_default="[]")
    # [{id, firstName, lastName, age, gender, personality, appearance, role}]
    characters = Column(JSON, nullable=False, server_default="[]")
    tags = Column(JSON, nullable=False, server_default="[]")
    content_tags = Column(JSON, nullable=False, server_default="[]")

    cover_prompt = Column(Text, nullable=True)
    cover_image_key = Column(String(500), nullable=True)
    visibility = Column(String(20), nullable=False, server_default="PUBLIC")
    generation_session_id = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_stories_user_created", "user_id", "created_at"),)
