from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from product_catalog.core.db import Base

# Largest value of a signed 32-bit INTEGER primary key.
ID_MAX = 2**31 - 1

TITLE_MIN_LENGTH = 6
TITLE_MAX_LENGTH = 32
DESCRIPTION_MIN_LENGTH = 32
DESCRIPTION_MAX_LENGTH = 1024


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"Product(id={self.id!r}, title={self.title!r})"
