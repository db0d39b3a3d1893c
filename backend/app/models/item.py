"""Item ORM — reference data seeded by an external process, read-only to this service."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Item(Base):
    __tablename__ = "items"

    item_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    item_name: Mapped[str] = mapped_column(String(256), nullable=False)
