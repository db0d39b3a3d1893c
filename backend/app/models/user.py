"""User ORM — a person who can own items.

Invariants:
    - user_id is assigned by the service (UUIDv4 string), never by the database
    - created_at == updated_at on insert; rows are never updated or deleted here
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    items: Mapped[list["UserItem"]] = relationship(
        "UserItem", back_populates="user", lazy="selectin",
    )
