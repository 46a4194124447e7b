"""Tenant-scoped resource store — list/create/update/delete for one resource kind.

The caller's user_id is part of the WHERE clause of every statement the
store issues. Update and delete match on (id, user_id) in a single
UPDATE/DELETE ... RETURNING, so there is no fetch-then-check path that
could read another tenant's row. A record that does not exist and a
record that belongs to someone else both come back as NotFound.

Each operation is one statement and one commit. Store failures are
converted here: IntegrityError becomes Conflict, anything else from
SQLAlchemy becomes StoreUnavailable. The session is rolled back first,
so the pooled connection goes back clean.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerly.db.models import Base
from ledgerly.errors import Conflict, NotFound, StoreUnavailable, ValidationError

logger = structlog.get_logger()

# Source of new record ids. Swap it for a deterministic one in tests.
IdGenerator = Callable[[], uuid.UUID]


def random_id() -> uuid.UUID:
    """128-bit random identifier."""
    return uuid.uuid4()


@dataclass(frozen=True)
class ResourceDefinition:
    """Everything the store needs to know about one resource kind.

    fields are the caller-writable columns; a create or update payload
    must carry exactly these. order_by is applied to List.
    """

    kind: str
    label: str
    model: type[Base]
    fields: tuple[str, ...]
    order_by: tuple = field(default=())
    conflict_message: str = "Record already exists"


def parse_record_id(raw: str | uuid.UUID) -> uuid.UUID:
    """Parse a path id. Anything that is not a UUID cannot match a row."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(raw)
    except (ValueError, AttributeError, TypeError):
        raise NotFound()


class TenantScopedStore:
    """CRUD for one resource kind, always filtered by the caller's user_id."""

    def __init__(
        self,
        db: AsyncSession,
        resource: ResourceDefinition,
        id_generator: IdGenerator = random_id,
    ):
        self.db = db
        self.resource = resource
        self.model = resource.model
        self.new_id = id_generator

    # ─── Reads ──────────────────────────────────────────

    async def list(self, user_id: uuid.UUID) -> list[Any]:
        """All of the user's records, in the kind's list order."""
        query = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(*self.resource.order_by)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            await self._fail(e, user_id)
        return list(result.scalars().all())

    # ─── Writes ─────────────────────────────────────────

    async def create(self, user_id: uuid.UUID, payload: dict) -> Any:
        """Insert a new record owned by user_id under a freshly generated id."""
        values = self._checked(payload)
        record_id = self.new_id()
        stmt = (
            insert(self.model)
            .values(id=record_id, user_id=user_id, **values)
            .returning(self.model)
        )
        record = await self._write(stmt, user_id)
        logger.info(
            "resource.created",
            kind=self.resource.kind,
            user_id=str(user_id),
            record_id=str(record_id),
        )
        return record

    async def update(self, user_id: uuid.UUID, record_id: str | uuid.UUID, payload: dict) -> Any:
        """Replace the mutable fields of the user's record.

        Raises NotFound when no row matches (id, user_id).
        """
        values = self._checked(payload)
        record_id = parse_record_id(record_id)
        stmt = (
            update(self.model)
            .where(self.model.id == record_id, self.model.user_id == user_id)
            .values(**values)
            .returning(self.model)
        )
        record = await self._write(stmt, user_id)
        if record is None:
            raise NotFound(f"{self.resource.label} not found")
        logger.info(
            "resource.updated",
            kind=self.resource.kind,
            user_id=str(user_id),
            record_id=str(record_id),
        )
        return record

    async def delete(self, user_id: uuid.UUID, record_id: str | uuid.UUID) -> Any:
        """Physically remove the user's record and return it."""
        return await self.delete_where(user_id, id=parse_record_id(record_id))

    async def delete_where(self, user_id: uuid.UUID, **criteria: Any) -> Any:
        """Delete the user's single record matching column == value criteria.

        The user_id filter is always added; callers only narrow further.
        """
        conditions = [getattr(self.model, column) == value for column, value in criteria.items()]
        stmt = (
            delete(self.model)
            .where(self.model.user_id == user_id, *conditions)
            .returning(self.model)
        )
        record = await self._write(stmt, user_id)
        if record is None:
            raise NotFound(f"{self.resource.label} not found")
        logger.info(
            "resource.deleted",
            kind=self.resource.kind,
            user_id=str(user_id),
            record_id=str(record.id),
        )
        return record

    # ─── Internals ──────────────────────────────────────

    def _checked(self, payload: dict) -> dict:
        """Reject payloads that are missing writable fields or carry others."""
        missing = [name for name in self.resource.fields if name not in payload]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        extra = sorted(set(payload) - set(self.resource.fields))
        if extra:
            raise ValidationError(f"Fields cannot be written: {', '.join(extra)}")
        return {name: payload[name] for name in self.resource.fields}

    async def _write(self, stmt, user_id: uuid.UUID) -> Any:
        """Execute one write statement and commit it."""
        try:
            result = await self.db.execute(stmt)
            record = result.scalars().first()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            error = str(e.orig)
            if "foreign key" in error.lower():
                # Token is valid but its user row no longer exists
                logger.info("resource.owner_missing", kind=self.resource.kind, user_id=str(user_id))
                raise Conflict("Account no longer exists") from e
            logger.info(
                "resource.conflict",
                kind=self.resource.kind,
                user_id=str(user_id),
                error=error,
            )
            raise Conflict(self.resource.conflict_message) from e
        except SQLAlchemyError as e:
            await self._fail(e, user_id)
        return record

    async def _fail(self, exc: SQLAlchemyError, user_id: uuid.UUID):
        await self.db.rollback()
        logger.error(
            "store.error",
            kind=self.resource.kind,
            user_id=str(user_id),
            error=str(exc),
        )
        raise StoreUnavailable() from exc
