# backend/sitecms/topics/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class Topic(Base):
    __tablename__ = "topics"
    __table_args__ = (
        Index("ix_topics_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(512), nullable=False)
    image_public_id = Column(String(255), nullable=True)  # media host id, used to drop replaced images
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="topics")
    # no delete cascade: removing a topic that still has posts is left to the FK
    posts = relationship(
        "Post",
        back_populates="topic",
        lazy="selectin",
        passive_deletes="all",
        order_by="Post.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"Topic(id={self.id}, name={self.name!r}, user_id={self.user_id})"
    def __str__(self) -> str:
        return self.name
