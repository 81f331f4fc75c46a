"""Company model. A treasury of type COMPANY belongs to exactly one company."""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ledger.models.base import BaseModel


class Company(BaseModel):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String, unique=True)
    code: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)
    active: Mapped[bool] = mapped_column(default=True)
    comment: Mapped[Optional[str]]
