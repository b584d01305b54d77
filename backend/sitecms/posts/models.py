# backend/sitecms/posts/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, index=True)  # always derived from title
    content = Column(Text, nullable=False)
    image = Column(String(512), nullable=False)
    image_public_id = Column(String(255), nullable=True)
    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    topic = relationship("Topic", back_populates="posts", lazy="selectin")

    @property
    def topic_name(self):
        return self.topic.name if self.topic is not None else None

    def __repr__(self) -> str:
        return f"Post(id={self.id}, slug={self.slug!r}, topic_id={self.topic_id})"
    def __str__(self) -> str:
        return self.title
