"""
Record stores: id-keyed CRUD over SQLModel tables.

Handlers talk to persistence only through ``Records``; nothing above this
module builds SQL against a session directly.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from ccred.core.exceptions import NotFoundError, StateConflictError
from ccred.models.audit import AuditLog
from ccred.models.credit import CarbonCredit
from ccred.models.listing import MarketplaceListing
from ccred.models.project import Project
from ccred.models.stakeholder import Stakeholder
from ccred.models.upload import DataUpload
from ccred.models.verification import VerificationSubmission
from ccred.utils.time import utc_now

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


class RecordStore(Generic[ModelT]):
    """Keyed collection of one entity type."""

    def __init__(self, session: AsyncSession, model: Type[ModelT], label: str):
        self.session = session
        self.model = model
        self.label = label

    async def insert(self, record: ModelT) -> ModelT:
        """Persist a new record and return it with generated fields loaded."""
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def find(self, record_id: Any) -> Optional[ModelT]:
        """Lookup by id; None when absent."""
        if record_id is None:
            return None
        return await self.session.get(self.model, record_id)

    async def get(self, record_id: Any) -> ModelT:
        """Lookup by id, raising NotFoundError when absent."""
        record = await self.find(record_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found", details={"id": record_id})
        return record

    async def list(self, *predicates, order_by=None) -> List[ModelT]:
        """Records matching all predicates (SQL expressions on the model's columns)."""
        statement = select(self.model)
        for predicate in predicates:
            statement = statement.where(predicate)
        if order_by is not None:
            statement = statement.order_by(order_by)
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count(self, *predicates) -> int:
        statement = select(func.count()).select_from(self.model)
        for predicate in predicates:
            statement = statement.where(predicate)
        result = await self.session.execute(statement)
        return result.scalar() or 0

    async def exists(self, *predicates) -> bool:
        return await self.count(*predicates) > 0

    async def update(
        self,
        record_id: Any,
        patch: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None
    ) -> ModelT:
        """
        Apply ``patch`` to a record and return the updated record.

        With ``expected``, the write is a compare-and-swap: it only happens if
        the stored row still has those field values, otherwise
        StateConflictError is raised and nothing changes.
        """
        record = await self.get(record_id)
        values = self._coerce(record, patch)
        if "updated_at" in self.model.model_fields:
            values["updated_at"] = utc_now()

        if expected is None:
            for key, value in values.items():
                setattr(record, key, value)
            await self.session.commit()
            await self.session.refresh(record)
            return record

        statement = update(self.model).where(self._pk_column() == record_id)
        for key, value in expected.items():
            statement = statement.where(getattr(self.model, key) == value)
        statement = statement.values(**values).execution_options(synchronize_session=False)

        result = await self.session.execute(statement)
        await self.session.commit()
        if result.rowcount == 0:
            current = await self.find(record_id)
            if current is None:
                raise NotFoundError(f"{self.label} not found", details={"id": record_id})
            await self.session.refresh(current)
            logger.info("Compare-and-swap lost on %s %s (expected %s)", self.label, record_id, expected)
            raise StateConflictError(
                f"{self.label} was modified concurrently",
                details={"id": record_id, "expected": _plain(expected)}
            )

        await self.session.refresh(record)
        return record

    async def delete(self, record_id: Any) -> None:
        """Remove a record, raising NotFoundError when absent."""
        record = await self.get(record_id)
        await self.session.delete(record)
        await self.session.commit()

    def _pk_column(self):
        return getattr(self.model, "id")

    def _coerce(self, record: ModelT, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate the patched record through the model so JSON-mode values
        (ISO dates, enum values) come back as column-native Python types.
        """
        merged = self.model.model_validate({**record.model_dump(), **patch})
        return {key: getattr(merged, key) for key in patch}


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: getattr(value, "value", value) for key, value in values.items()}


class Records:
    """One record store per entity type, sharing a session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = RecordStore(session, Project, "Project")
        self.stakeholders = RecordStore(session, Stakeholder, "Stakeholder")
        self.uploads = RecordStore(session, DataUpload, "Upload")
        self.submissions = RecordStore(session, VerificationSubmission, "Submission")
        self.credits = RecordStore(session, CarbonCredit, "Credit")
        self.listings = RecordStore(session, MarketplaceListing, "Listing")
        self.audit = RecordStore(session, AuditLog, "Audit entry")

    async def rollback(self) -> None:
        """Discard pending state after a failed write."""
        await self.session.rollback()
