from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class DailyCheckIn(BaseModel, Base):
    __tablename__ = "daily_checkins"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    circle_id = Column(String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False)
    # Calendar day in the user's own timezone, "YYYY-MM-DD"
    date = Column(String(10), nullable=False)

    deen = Column(Boolean, nullable=False, default=False)
    body = Column(Boolean, nullable=False, default=False)
    mind = Column(Boolean, nullable=False, default=False)
    mission = Column(Boolean, nullable=False, default=False)
    brotherhood = Column(Boolean, nullable=False, default=False)
    score = Column(Integer, nullable=False, default=0)
    note_private = Column(String(2000), nullable=True)

    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "circle_id", "date", name="uq_checkins_user_circle_date"),
        CheckConstraint("score >= 0 AND score <= 5", name="ck_checkins_score_range"),
        Index("ix_checkins_circle_date", "circle_id", "date"),
    )
