"""Dataclass snapshots of work orders and history entries.

These containers are what the progression engine and the bucketing
functions operate on.  They are built from the SQLAlchemy rows by
:mod:`seguimiento_ots.services.work_order_store` and never talk to the
database themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Tuple

# Localizações (buckets) em ordem de avanço
INCO = "INCO"
ANTI = "ANTI"
ARCHIVED = "ARCHIVED"
LOCATION_ORDER: Tuple[str, ...] = (INCO, ANTI, ARCHIVED)


def location_rank(location: str) -> int:
    """Posição da localização no fluxo INCO -> ANTI -> ARCHIVED."""
    try:
        return LOCATION_ORDER.index(location)
    except ValueError:
        raise ValueError(f"Localização desconhecida: {location!r}") from None


@dataclass
class WorkOrder:
    """A work order (OT) and the dates recorded for each stage."""

    ot: str
    client: str = field(default="")
    description: str = field(default="")
    tag: str = field(default="")
    status: str = field(default="")
    progress: int = field(default=0)
    location: str = field(default=INCO)
    dates: Dict[str, date] = field(default_factory=dict)
    id: Optional[int] = field(default=None)
    created_at: Optional[datetime] = field(default=None)

    @property
    def is_archived(self) -> bool:
        return self.location == ARCHIVED

    def first_date(self) -> Optional[date]:
        """Menor data registrada (cronológica, não a primeira chave)."""
        if not self.dates:
            return None
        return min(self.dates.values())

    def as_dict(self) -> dict:
        return {
            "ot": self.ot,
            "client": self.client,
            "description": self.description,
            "tag": self.tag,
            "status": self.status,
            "progress": self.progress,
            "location": self.location,
            "dates": {stage: d.isoformat() for stage, d in self.dates.items()},
        }

    def __repr__(self) -> str:
        return f"<WorkOrder ot={self.ot} location={self.location} status={self.status!r}>"


@dataclass
class HistoryEntry:
    """One line of the recent-activity feed."""

    timestamp: datetime
    ot: str
    field: str
    old_value: Optional[str]
    new_value: Optional[str]
    actor: str

    def as_dict(self) -> dict:
        return {
            "changed_at": self.timestamp.isoformat(),
            "ot": self.ot,
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "user": self.actor,
        }
