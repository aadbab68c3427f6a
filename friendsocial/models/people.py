"""
User and Location models.

Both are owned by record stores outside the scheduling engine; they are
declared here so that preferences, rosters and participations can carry
real foreign keys.
"""

from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from friendsocial.models.base import BaseModel

if TYPE_CHECKING:
    from friendsocial.models.scheduling import Participation


class Location(BaseModel):
    """A place where activities happen."""

    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Location(name='{self.name}', city='{self.city}')>"


class User(BaseModel):
    """A person who can own preferences and be invited to occurrences."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Login email (unique)"
    )

    location_id: Mapped[Optional[int]] = mapped_column(
        nullable=True,
        doc="Home location (not enforced; owned by the location store)"
    )

    participations: Mapped[list["Participation"]] = relationship(
        "Participation",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_users_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<User(name='{self.name}', email='{self.email}')>"
