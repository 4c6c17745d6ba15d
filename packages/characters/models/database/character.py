from sqlalchemy import Column, String, DateTime, Integer, Text, Index
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType


class CharacterEntity(Base):
    __tablename__ = "characters"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(128), nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(50), nullable=True)
    species = Column(String(100), nullable=True)
    style = Column(String(30), nullable=False)  # VisualStyle

    physical_characteristics = Column(Text, nullable=True)
    personality = Column(Text, nullable=True)
    history = Column(Text, nullable=True)

    age_rating = Column(String(20), nullable=False, index=True)
    visibility = Column(String(20), nullable=False, server_default="PRIVATE")
    avatar_image_key = Column(String(500), nullable=True)
    generation_session_id = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_characters_user_created", "user_id", "created_at"),)
