"""Category API routes.

Categories are the one kind with a uniqueness rule: a name may appear
once per user (409 on a repeat), while different users may each have
a category with the same name.

DELETE /categories/{name} removes by name, which is what existing
clients call. DELETE /categories/id/{category_id} removes by id, the
same way every other kind does; new clients should use that one.
"""

from fastapi import APIRouter, Depends

from ledgerly.api.resources import store_for
from ledgerly.auth.dependencies import CurrentIdentity, get_current_user
from ledgerly.schemas.resources import CategoryRead, CategoryWrite, DeleteResult
from ledgerly.services.resources import CATEGORIES
from ledgerly.services.store import TenantScopedStore

router = APIRouter(prefix="/categories")

_store = store_for(CATEGORIES)


@router.get("", response_model=list[CategoryRead])
async def list_categories(
    identity: CurrentIdentity = Depends(get_current_user),
    store: TenantScopedStore = Depends(_store),
):
    return await store.list(identity.user_id)


@router.post("", response_model=CategoryRead, status_code=201)
async def create_category(
    body: CategoryWrite,
    identity: CurrentIdentity = Depends(get_current_user),
    store: TenantScopedStore = Depends(_store),
):
    return await store.create(identity.user_id, body.model_dump())


@router.put("/{category_id}", response_model=CategoryRead)
async def rename_category(
    category_id: str,
    body: CategoryWrite,
    identity: CurrentIdentity = Depends(get_current_user),
    store: TenantScopedStore = Depends(_store),
):
    """Rename a category. 409 if the user already has one with the new name."""
    return await store.update(identity.user_id, category_id, body.model_dump())


@router.delete("/id/{category_id}", response_model=DeleteResult)
async def delete_category_by_id(
    category_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    store: TenantScopedStore = Depends(_store),
):
    record = await store.delete(identity.user_id, category_id)
    return DeleteResult(message="Category deleted", id=record.id)


@router.delete("/{name}", response_model=DeleteResult)
async def delete_category_by_name(
    name: str,
    identity: CurrentIdentity = Depends(get_current_user),
    store: TenantScopedStore = Depends(_store),
):
    record = await store.delete_where(identity.user_id, name=name)
    return DeleteResult(message="Category deleted", id=record.id)
