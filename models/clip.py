from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, CheckConstraint, Index, text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, utcnow


class CircleClip(BaseModel, Base):
    __tablename__ = "circle_clips"

    circle_id = Column(String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False)
    posted_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_url = Column(String(2048), nullable=False)
    title = Column(String(200), nullable=True)
    caption = Column(String(1000), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    posted_by = relationship("User")

    __table_args__ = (
        Index("ix_clips_circle_active", "circle_id", "is_active"),
        # at most one active clip per circle, even when two posts race
        Index(
            "uq_clips_one_active_per_circle",
            "circle_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )


class ClipRotation(BaseModel, Base):
    __tablename__ = "clip_rotations"

    circle_id = Column(String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False, unique=True)
    current_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # Ordered list of user ids; replaced wholesale, never mutated in place
    rotation_order = Column(JSON, nullable=False, default=list)
    interval_days = Column(Integer, nullable=False, default=3)
    last_rotated_at = Column(DateTime, nullable=False, default=utcnow)

    current_user = relationship("User")

    __table_args__ = (
        CheckConstraint("interval_days >= 1 AND interval_days <= 14", name="ck_rotation_interval_range"),
    )
