"""Resource API routes — transactions, goals and bills.

The three id-keyed kinds share one route shape, so their routers are
built by resource_router(). Categories differ in how DELETE is keyed
and live in categories.py.

Routes translate HTTP to store calls; the store owns tenant scoping
and error conversion. Every route takes the caller's identity from
get_current_user and passes its user_id down.
"""

from typing import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerly.auth.dependencies import CurrentIdentity, get_current_user
from ledgerly.db.engine import get_db
from ledgerly.schemas.resources import (
    BillRead,
    BillWrite,
    DeleteResult,
    GoalRead,
    GoalWrite,
    TransactionRead,
    TransactionWrite,
)
from ledgerly.services.resources import BILLS, GOALS, TRANSACTIONS
from ledgerly.services.store import (
    IdGenerator,
    ResourceDefinition,
    TenantScopedStore,
    random_id,
)


def get_id_generator() -> IdGenerator:
    """Dependency for the id source. Overridden in tests."""
    return random_id


def store_for(resource: ResourceDefinition) -> Callable[..., TenantScopedStore]:
    """Build a dependency that yields a request-scoped store for one kind."""

    def _store(
        db: AsyncSession = Depends(get_db),
        id_generator: IdGenerator = Depends(get_id_generator),
    ) -> TenantScopedStore:
        return TenantScopedStore(db, resource, id_generator=id_generator)

    return _store


def resource_router(resource: ResourceDefinition, write_schema, read_schema) -> APIRouter:
    router = APIRouter(prefix=f"/{resource.kind}")
    _store = store_for(resource)

    @router.get("", response_model=list[read_schema])
    async def list_records(
        identity: CurrentIdentity = Depends(get_current_user),
        store: TenantScopedStore = Depends(_store),
    ):
        return await store.list(identity.user_id)

    @router.post("", response_model=read_schema, status_code=201)
    async def create_record(
        body: write_schema,
        identity: CurrentIdentity = Depends(get_current_user),
        store: TenantScopedStore = Depends(_store),
    ):
        return await store.create(identity.user_id, body.model_dump())

    @router.put("/{record_id}", response_model=read_schema)
    async def update_record(
        record_id: str,
        body: write_schema,
        identity: CurrentIdentity = Depends(get_current_user),
        store: TenantScopedStore = Depends(_store),
    ):
        return await store.update(identity.user_id, record_id, body.model_dump())

    @router.delete("/{record_id}", response_model=DeleteResult)
    async def delete_record(
        record_id: str,
        identity: CurrentIdentity = Depends(get_current_user),
        store: TenantScopedStore = Depends(_store),
    ):
        record = await store.delete(identity.user_id, record_id)
        return DeleteResult(message=f"{resource.label} deleted", id=record.id)

    return router


transactions_router = resource_router(TRANSACTIONS, TransactionWrite, TransactionRead)
goals_router = resource_router(GOALS, GoalWrite, GoalRead)
bills_router = resource_router(BILLS, BillWrite, BillRead)
