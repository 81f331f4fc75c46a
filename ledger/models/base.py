"""Base for all ORM models"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.inspection import inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def utcnow() -> datetime:
    """Naive UTC timestamp, the time base of every created_at column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(DeclarativeBase):
    # do not create separate table for this class
    __abstract__ = True

    # everything should have an id and a creation time
    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )

    def __repr__(self):
        """Automatically generate a readable __repr__ of a database object"""
        model_name = self.__class__.__name__
        attr_strs = []
        for attr, column in inspect(self.__class__).columns.items():
            value = getattr(self, attr)
            attr_strs.append(
                f"{attr}={value!r}"
            )  # !r calls repr() on the value to get a nice string representation
        attr_str = ", ".join(attr_strs)
        return f"<{model_name}({attr_str})>"
