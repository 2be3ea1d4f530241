from enum import Enum

from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base


class VisibilityMode(str, Enum):
    SCORE_ONLY = "score_only"
    DETAILED = "detailed"
    CUSTOM = "custom"


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Circle(BaseModel, Base):
    __tablename__ = "circles"

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    # 8 uppercase hex chars, see utils.security.generate_invite_code
    invite_code = Column(String(16), nullable=False, unique=True, index=True)
    visibility_mode = Column(
        SAEnum(VisibilityMode, name="visibility_mode", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=VisibilityMode.SCORE_ONLY,
    )

    members = relationship(
        "CircleMember",
        back_populates="circle",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CircleMember(BaseModel, Base):
    __tablename__ = "circle_members"

    circle_id = Column(String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        SAEnum(MemberRole, name="member_role", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=MemberRole.MEMBER,
    )

    circle = relationship("Circle", back_populates="members")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("circle_id", "user_id", name="uq_circle_members_circle_user"),
    )
