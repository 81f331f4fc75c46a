"""Company service"""

from fastapi import Depends
from sqlalchemy.orm import Query, Session

from ledger.models.company import Company
from ledger.schemas.company import CompanyFiltersSchema
from ledger.services.base import BaseService
from ledger.uow import get_uow


class CompanyService(BaseService[Company]):
    model = Company

    def __init__(self, db: Session = Depends(get_uow)):
        self.db = db

    def delete(self, obj_id):
        """Treasuries reference companies by id; deleting one would orphan them."""
        raise NotImplementedError

    def _apply_filters(
        self, query: Query[Company], filters: CompanyFiltersSchema
    ) -> Query[Company]:
        if filters.name is not None:
            query = query.filter(self.model.name.ilike(f"%{filters.name}%"))
        if filters.active is not None:
            query = query.filter(self.model.active == filters.active)
        return query
