from enum import Enum

from sqlalchemy import Column, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base


class Pillar(str, Enum):
    DEEN = "deen"
    BODY = "body"
    MIND = "mind"
    MISSION = "mission"
    BROTHERHOOD = "brotherhood"


class PillarJournal(BaseModel, Base):
    __tablename__ = "pillar_journals"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    circle_id = Column(String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False)
    pillar = Column(
        SAEnum(Pillar, name="pillar", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    title = Column(String(200), nullable=True)
    content = Column(Text, nullable=False)

    user = relationship("User")
    comments = relationship(
        "JournalComment",
        back_populates="journal",
        order_by="JournalComment.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_journals_circle_created", "circle_id", "created_at"),
    )


class JournalComment(BaseModel, Base):
    __tablename__ = "journal_comments"

    journal_id = Column(String(36), ForeignKey("pillar_journals.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(String(2000), nullable=False)

    journal = relationship("PillarJournal", back_populates="comments")
    user = relationship("User")
