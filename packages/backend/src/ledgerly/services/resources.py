"""The four resource kinds and their store configuration.

All four share TenantScopedStore; they differ only in which columns a
caller may write and how List orders the rows.
"""

from ledgerly.db.models import Bill, Category, Goal, Transaction
from ledgerly.services.store import ResourceDefinition

CATEGORIES = ResourceDefinition(
    kind="categories",
    label="Category",
    model=Category,
    fields=("name",),
    order_by=(Category.name.asc(),),
    conflict_message="Category already exists",
)

TRANSACTIONS = ResourceDefinition(
    kind="transactions",
    label="Transaction",
    model=Transaction,
    fields=("description", "amount", "date", "type", "category"),
    order_by=(Transaction.date.desc(),),
)

GOALS = ResourceDefinition(
    kind="goals",
    label="Goal",
    model=Goal,
    fields=("name", "amount", "saved", "target_date"),
    order_by=(Goal.id,),
)

BILLS = ResourceDefinition(
    kind="bills",
    label="Bill",
    model=Bill,
    fields=("description", "amount", "due_date", "paid"),
    order_by=(Bill.due_date.asc(),),
)

ALL_RESOURCES = (CATEGORIES, TRANSACTIONS, GOALS, BILLS)
