"""DTO for Company"""

from ledger.schemas.base import BaseFilterSchema, BaseReadSchema, BaseUpdateSchema


class CompanySchema(BaseReadSchema):
    name: str
    code: str | None = None
    active: bool
    comment: str | None = None


class CompanyCreateSchema(BaseUpdateSchema):
    name: str
    code: str | None = None
    active: bool | None = True
    comment: str | None = None


class CompanyUpdateSchema(BaseUpdateSchema):
    name: str | None = None
    code: str | None = None
    active: bool | None = None
    comment: str | None = None


class CompanyFiltersSchema(BaseFilterSchema):
    name: str | None = None
    active: bool | None = None
