# backend/sitecms/tips/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class Tip(Base):
    __tablename__ = "tips"
    __table_args__ = (
        Index("ix_tips_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="tips")

    def __repr__(self) -> str:
        return f"Tip(id={self.id}, title={self.title!r}, user_id={self.user_id})"
    def __str__(self) -> str:
        return self.title
