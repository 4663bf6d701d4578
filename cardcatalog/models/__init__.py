from cardcatalog.models.catalog import (
    CardDraft,
    CardFilter,
    CardPatch,
    CardSubTypePatch,
    CardTypePatch,
    CardView,
    DeletionReceipt,
    Pagination,
    StatisticsPatch,
    StatisticsView,
    SubTypeView,
    apply_patch,
)
from cardcatalog.models.failure import (
    ApiResponse,
    ConflictError,
    FailureDetail,
    FailureKind,
    InvalidArgumentError,
    KnownError,
    NotFoundError,
    OutcomeType,
)

__all__ = [
    "ApiResponse",
    "CardDraft",
    "CardFilter",
    "CardPatch",
    "CardSubTypePatch",
    "CardTypePatch",
    "CardView",
    "ConflictError",
    "DeletionReceipt",
    "FailureDetail",
    "FailureKind",
    "InvalidArgumentError",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "Pagination",
    "StatisticsPatch",
    "StatisticsView",
    "SubTypeView",
    "apply_patch",
]
