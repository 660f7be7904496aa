import logging
from typing import Any, Dict

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront_admin.core.database import execute, transaction
from storefront_admin.core.errors import AppError, NotFoundError

logger = logging.getLogger(__name__)


class EntityService:
    """
    Insert-then-reselect, sparse update and hard delete for one table.

    Subclasses set ``model`` and ``label`` and may override ``_select``
    to eager-load whatever their responses show.
    """
    model: Any = None
    label = "Record"

    def __init__(self, db: Session):
        self.db = db

    def _select(self):
        return select(self.model)

    def _find(self, record_id: int):
        return self.db.scalars(self._select().where(self.model.id == record_id)).first()

    def _get(self, record_id: int):
        record = self._find(record_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def _create(self, record):
        with transaction(self.db):
            self.db.add(record)
            self.db.flush()
            record_id = record.id
        created = self._find(record_id)
        if created is None:
            raise AppError(f"Failed to create {self.label.lower()}")
        logger.info(f"Created {self.label.lower()} {record_id}")
        return created

    def _update(self, record_id: int, fields: Dict[str, Any]):
        record = self._get(record_id)
        if not fields:
            return record
        with transaction(self.db):
            for field, value in fields.items():
                setattr(record, field, value)
        logger.info(f"Updated {self.label.lower()} {record_id}: {sorted(fields)}")
        return self._get(record_id)

    def _delete(self, record_id: int) -> None:
        with transaction(self.db):
            result = execute(self.db, delete(self.model).where(self.model.id == record_id))
        if result.affected_rows == 0:
            raise NotFoundError(f"{self.label} not found")
        logger.info(f"Deleted {self.label.lower()} {record_id}")
