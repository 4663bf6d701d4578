from cardcatalog.api.card_sub_types import router as card_sub_types_router
from cardcatalog.api.card_types import router as card_types_router
from cardcatalog.api.cards import router as cards_router
from cardcatalog.api.errors import register_error_handlers
from cardcatalog.api.health import router as health_router

__all__ = [
    "card_sub_types_router",
    "card_types_router",
    "cards_router",
    "health_router",
    "register_error_handlers",
]
