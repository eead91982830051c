from .allocations import (
    create_allocation,
    delete_allocation,
    distribute_income,
    get_allocation,
    list_allocation_logs,
    list_allocations,
    update_allocation,
)
from .balances import apply_transaction, revert_transaction, validate_event_shape
from .categories import create_category, delete_category, get_category, list_categories, rename_category
from .daily_summaries import (
    backfill_daily_summaries,
    build_daily_summary,
    list_daily_summaries,
    run_daily_summaries,
)
from .dashboard import get_charts, get_summary
from .platforms import (
    create_platform,
    create_user_platform,
    delete_user_platform,
    get_user_platform,
    list_platforms,
    list_user_platforms,
    update_user_platform,
)
from .pockets import create_pocket, delete_pocket, ensure_main_pocket, get_pocket, list_pockets, update_pocket
from .transactions import cancel_transaction, create_transaction, get_transaction, list_transactions
from .users import create_user, get_user, get_user_by_telegram_id, list_users

__all__ = [
    "apply_transaction",
    "backfill_daily_summaries",
    "build_daily_summary",
    "cancel_transaction",
    "create_allocation",
    "create_category",
    "create_platform",
    "create_pocket",
    "create_transaction",
    "create_user",
    "create_user_platform",
    "delete_allocation",
    "delete_category",
    "delete_pocket",
    "delete_user_platform",
    "distribute_income",
    "ensure_main_pocket",
    "get_allocation",
    "get_category",
    "get_charts",
    "get_pocket",
    "get_summary",
    "get_transaction",
    "get_user",
    "get_user_by_telegram_id",
    "get_user_platform",
    "list_allocation_logs",
    "list_allocations",
    "list_categories",
    "list_daily_summaries",
    "list_platforms",
    "list_pockets",
    "list_transactions",
    "list_user_platforms",
    "list_users",
    "rename_category",
    "revert_transaction",
    "run_daily_summaries",
    "update_allocation",
    "update_pocket",
    "update_user_platform",
    "validate_event_shape",
]
