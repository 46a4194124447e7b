"""TenantScopedStore tests — driven directly against a session, no HTTP.

Covers the tenant-isolation contract:
1. List never returns another tenant's rows
2. Create assigns ids from the injected generator
3. Per-tenant uniqueness surfaces as Conflict with nothing committed
4. Update/Delete on a foreign or missing id is NotFound, record untouched
5. Store failures become StoreUnavailable and the session is rolled back
"""

import datetime as dt
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from ledgerly.db.models import User
from ledgerly.errors import Conflict, NotFound, StoreUnavailable, ValidationError
from ledgerly.services.resources import BILLS, CATEGORIES, GOALS, TRANSACTIONS
from ledgerly.services.store import TenantScopedStore, parse_record_id

ALICE = uuid.uuid4()
BOB = uuid.uuid4()


def _ids():
    counter = iter(range(1, 1000))
    return lambda: uuid.UUID(int=next(counter))


def _bill(description="Rent", amount=1000.0, due_date=dt.date(2024, 1, 1), paid=False):
    return {"description": description, "amount": amount, "due_date": due_date, "paid": paid}


# ═══════════════════════════════════════════════════════════
# Create + List
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_uses_injected_id_generator(db_session):
    store = TenantScopedStore(db_session, BILLS, id_generator=_ids())

    first = await store.create(ALICE, _bill())
    second = await store.create(ALICE, _bill(description="Water"))

    assert first.id == uuid.UUID(int=1)
    assert second.id == uuid.UUID(int=2)
    assert first.user_id == ALICE


@pytest.mark.asyncio
async def test_default_ids_are_random_uuid4(db_session):
    store = TenantScopedStore(db_session, CATEGORIES)

    a = await store.create(ALICE, {"name": "Food"})
    b = await store.create(ALICE, {"name": "Rent"})

    assert a.id != b.id
    assert a.id.version == 4


@pytest.mark.asyncio
async def test_list_only_returns_own_rows(db_session):
    store = TenantScopedStore(db_session, BILLS)
    await store.create(ALICE, _bill(description="Alice rent"))
    await store.create(BOB, _bill(description="Bob rent"))

    alice_bills = await store.list(ALICE)
    assert [b.description for b in alice_bills] == ["Alice rent"]
    assert all(b.user_id == ALICE for b in alice_bills)


@pytest.mark.asyncio
async def test_list_empty_for_new_tenant(db_session):
    store = TenantScopedStore(db_session, GOALS)
    assert await store.list(uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_list_ordering_per_kind(db_session):
    categories = TenantScopedStore(db_session, CATEGORIES)
    for name in ("Travel", "Food", "Rent"):
        await categories.create(ALICE, {"name": name})
    assert [c.name for c in await categories.list(ALICE)] == ["Food", "Rent", "Travel"]

    bills = TenantScopedStore(db_session, BILLS)
    await bills.create(ALICE, _bill(description="March", due_date=dt.date(2024, 3, 1)))
    await bills.create(ALICE, _bill(description="January", due_date=dt.date(2024, 1, 1)))
    assert [b.description for b in await bills.list(ALICE)] == ["January", "March"]

    transactions = TenantScopedStore(db_session, TRANSACTIONS)
    for day in (1, 15, 7):
        await transactions.create(ALICE, {
            "description": f"day {day}",
            "amount": 10.0,
            "date": dt.date(2024, 5, day),
            "type": "expense",
            "category": None,
        })
    assert [t.date.day for t in await transactions.list(ALICE)] == [15, 7, 1]

    goals = TenantScopedStore(db_session, GOALS, id_generator=iter(
        [uuid.UUID(int=3), uuid.UUID(int=1), uuid.UUID(int=2)]
    ).__next__)
    for name in ("c", "a", "b"):
        await goals.create(ALICE, {"name": name, "amount": 100.0, "saved": 0.0, "target_date": None})
    assert [g.name for g in await goals.list(ALICE)] == ["a", "b", "c"]


# ═══════════════════════════════════════════════════════════
# Uniqueness
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_duplicate_category_conflicts(db_session):
    store = TenantScopedStore(db_session, CATEGORIES)
    await store.create(ALICE, {"name": "Groceries"})

    with pytest.raises(Conflict):
        await store.create(ALICE, {"name": "Groceries"})

    # No duplicate committed, and the session is still usable
    assert [c.name for c in await store.list(ALICE)] == ["Groceries"]


@pytest.mark.asyncio
async def test_same_category_name_allowed_across_tenants(db_session):
    store = TenantScopedStore(db_session, CATEGORIES)
    a = await store.create(ALICE, {"name": "Groceries"})
    b = await store.create(BOB, {"name": "Groceries"})
    assert a.id != b.id


@pytest.mark.asyncio
async def test_rename_into_existing_name_conflicts(db_session):
    store = TenantScopedStore(db_session, CATEGORIES)
    await store.create(ALICE, {"name": "Food"})
    rent = await store.create(ALICE, {"name": "Rent"})

    with pytest.raises(Conflict):
        await store.update(ALICE, rent.id, {"name": "Food"})


@pytest.mark.asyncio
async def test_missing_owner_is_not_reported_as_duplicate(db_session):
    """A token for a deleted account hits the users FK, not the unique index."""
    await db_session.execute(text("PRAGMA foreign_keys=ON"))
    store = TenantScopedStore(db_session, CATEGORIES)

    with pytest.raises(Conflict) as exc_info:
        await store.create(ALICE, {"name": "Groceries"})
    assert exc_info.value.message == "Account no longer exists"

    owner = User(id=BOB, email="bob@example.com", name="Bob", password_hash="x")
    db_session.add(owner)
    await db_session.commit()
    await store.create(BOB, {"name": "Groceries"})
    with pytest.raises(Conflict) as exc_info:
        await store.create(BOB, {"name": "Groceries"})
    assert exc_info.value.message == "Category already exists"


# ═══════════════════════════════════════════════════════════
# Update / Delete ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_replaces_fields(db_session):
    store = TenantScopedStore(db_session, BILLS)
    bill = await store.create(ALICE, _bill())

    updated = await store.update(ALICE, str(bill.id), _bill(amount=1200.0, paid=True))
    assert updated.id == bill.id
    assert updated.amount == 1200.0
    assert updated.paid is True


@pytest.mark.asyncio
async def test_update_foreign_record_not_found(db_session):
    store = TenantScopedStore(db_session, BILLS)
    bill = await store.create(ALICE, _bill())

    with pytest.raises(NotFound):
        await store.update(BOB, bill.id, _bill(amount=1.0))

    [unchanged] = await store.list(ALICE)
    assert unchanged.amount == 1000.0
    assert unchanged.user_id == ALICE


@pytest.mark.asyncio
async def test_delete_twice_not_found(db_session):
    store = TenantScopedStore(db_session, GOALS)
    goal = await store.create(ALICE, {"name": "Car", "amount": 5000.0, "saved": 0.0, "target_date": None})

    deleted = await store.delete(ALICE, goal.id)
    assert deleted.id == goal.id

    with pytest.raises(NotFound):
        await store.delete(ALICE, goal.id)
    assert await store.list(ALICE) == []


@pytest.mark.asyncio
async def test_delete_foreign_record_not_found(db_session):
    store = TenantScopedStore(db_session, GOALS)
    goal = await store.create(ALICE, {"name": "Car", "amount": 5000.0, "saved": 0.0, "target_date": None})

    with pytest.raises(NotFound):
        await store.delete(BOB, goal.id)
    assert len(await store.list(ALICE)) == 1


@pytest.mark.asyncio
async def test_delete_where_always_scoped_to_user(db_session):
    store = TenantScopedStore(db_session, CATEGORIES)
    await store.create(ALICE, {"name": "Groceries"})
    await store.create(BOB, {"name": "Groceries"})

    await store.delete_where(ALICE, name="Groceries")

    assert await store.list(ALICE) == []
    assert [c.name for c in await store.list(BOB)] == ["Groceries"]


def test_parse_record_id_rejects_garbage_as_not_found():
    assert parse_record_id(str(uuid.UUID(int=5))) == uuid.UUID(int=5)
    with pytest.raises(NotFound):
        parse_record_id("not-a-uuid")


# ═══════════════════════════════════════════════════════════
# Payload checks
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_missing_fields_rejected_before_store(db_session):
    store = TenantScopedStore(db_session, BILLS)
    with patch.object(db_session, "execute", AsyncMock()) as execute:
        with pytest.raises(ValidationError, match="due_date"):
            await store.create(ALICE, {"description": "Rent", "amount": 1.0, "paid": False})
        execute.assert_not_called()


@pytest.mark.asyncio
async def test_id_and_owner_cannot_be_written(db_session):
    store = TenantScopedStore(db_session, CATEGORIES)
    with pytest.raises(ValidationError, match="user_id"):
        await store.create(ALICE, {"name": "Food", "user_id": BOB})
    with pytest.raises(ValidationError, match="id"):
        await store.create(ALICE, {"name": "Food", "id": uuid.uuid4()})


# ═══════════════════════════════════════════════════════════
# Store failures
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_store_error_becomes_store_unavailable(db_session):
    store = TenantScopedStore(db_session, BILLS)
    boom = OperationalError("INSERT INTO bills", {}, Exception("connection reset"))

    with patch.object(db_session, "execute", AsyncMock(side_effect=boom)), \
            patch.object(db_session, "rollback", AsyncMock()) as rollback:
        with pytest.raises(StoreUnavailable) as exc_info:
            await store.create(ALICE, _bill())

    rollback.assert_awaited_once()
    # Raw driver text stays out of the caller-facing message
    assert "connection reset" not in exc_info.value.message


@pytest.mark.asyncio
async def test_session_survives_failed_statement(db_session):
    store = TenantScopedStore(db_session, BILLS)
    boom = OperationalError("SELECT", {}, Exception("timeout"))

    with patch.object(db_session, "execute", AsyncMock(side_effect=boom)):
        with pytest.raises(StoreUnavailable):
            await store.list(ALICE)

    await store.create(ALICE, _bill())
    assert len(await store.list(ALICE)) == 1
