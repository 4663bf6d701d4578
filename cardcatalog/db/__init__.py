from cardcatalog.db.cards import (
    card_to_view,
    create_card,
    find_card,
    get_card,
    get_card_by_code,
    hard_delete_card,
    list_cards,
    soft_delete_card,
    update_card,
)
from cardcatalog.db.database import get_session, init_db
from cardcatalog.db.statistics import create_statistics, statistics_to_view, update_statistics
from cardcatalog.db.taxonomy import (
    create_sub_type,
    create_type,
    get_sub_type,
    get_type,
    list_sub_types,
    list_types,
    sub_type_to_view,
    update_sub_type,
    update_type,
)

__all__ = [
    "card_to_view",
    "create_card",
    "create_statistics",
    "create_sub_type",
    "create_type",
    "find_card",
    "get_card",
    "get_card_by_code",
    "get_session",
    "get_sub_type",
    "get_type",
    "hard_delete_card",
    "init_db",
    "list_cards",
    "list_sub_types",
    "list_types",
    "soft_delete_card",
    "statistics_to_view",
    "sub_type_to_view",
    "update_card",
    "update_statistics",
    "update_sub_type",
    "update_type",
]
