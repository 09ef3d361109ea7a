"""Top‑level package for the dataclass domain models.

Importing this package makes the work-order snapshot types and the
location constants available, e.g. ``seguimiento_ots.models.WorkOrder``
or ``seguimiento_ots.models.INCO``.
"""

from .work_order import (  # noqa: F401  pylint: disable=unused-import
    ANTI,
    ARCHIVED,
    INCO,
    LOCATION_ORDER,
    HistoryEntry,
    WorkOrder,
    location_rank,
)

__all__ = [
    "INCO",
    "ANTI",
    "ARCHIVED",
    "LOCATION_ORDER",
    "location_rank",
    "WorkOrder",
    "HistoryEntry",
]
