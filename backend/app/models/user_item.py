"""UserItem ORM — join record meaning "user owns item".

Invariants:
    - (user_id, item_id) is the primary key: a second insert of the pair fails
    - Both columns are foreign keys; referential integrity is enforced by the store
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class UserItem(Base):
    __tablename__ = "user_items"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.user_id"), primary_key=True,
    )
    item_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("items.item_id"), primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="items")
