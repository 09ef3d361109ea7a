# -*- coding: utf-8 -*-
"""
seguimiento_ots/services/bucketing.py

Projeções de leitura usadas pelas tabelas e pelo dashboard:
- partition(orders)              → Buckets(inco, anti, archived), mantendo a ordem de carga.
- delayed(orders, today)         → OTs cuja menor data tem mais de 30 dias.
- sort_by_progress(orders)       → ordenação estável por progresso decrescente (tabelas).
- dashboard_summary(buckets)     → contadores e tempos médios do dashboard.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, List, NamedTuple, Optional

from seguimiento_ots.models import ANTI, ARCHIVED, INCO, WorkOrder
from seguimiento_ots.services.stage_catalog import ANTI_STAGES, HANDOFF_STAGES, INCO_STAGES

DELAY_THRESHOLD_DAYS = 30

_INCO_NAMES = {s.name for s in INCO_STAGES}
_ANTI_NAMES = {s.name for s in ANTI_STAGES}


class Buckets(NamedTuple):
    inco: List[WorkOrder]
    anti: List[WorkOrder]
    archived: List[WorkOrder]

    @property
    def total(self) -> int:
        return len(self.inco) + len(self.anti) + len(self.archived)


def partition(orders: Iterable[WorkOrder]) -> Buckets:
    buckets = Buckets(inco=[], anti=[], archived=[])
    target = {INCO: buckets.inco, ANTI: buckets.anti, ARCHIVED: buckets.archived}
    for order in orders:
        try:
            target[order.location].append(order)
        except KeyError:
            raise ValueError(
                f"OT {order.ot} com localização desconhecida: {order.location!r}"
            ) from None
    return buckets


def is_delayed(order: WorkOrder, today: Optional[date] = None) -> bool:
    first = order.first_date()
    if first is None:
        return False
    today = today or date.today()
    return (today - first).days > DELAY_THRESHOLD_DAYS


def delayed(orders: Iterable[WorkOrder], today: Optional[date] = None) -> List[WorkOrder]:
    today = today or date.today()
    return [o for o in orders if is_delayed(o, today)]


def sort_by_progress(orders: Iterable[WorkOrder]) -> List[WorkOrder]:
    # sorted() é estável: empates mantêm a ordem de carga
    return sorted(orders, key=lambda o: -o.progress)


def _days_between(start: Optional[date], end: Optional[date]) -> Optional[int]:
    if start is None or end is None:
        return None
    return (end - start).days


def _average(samples: List[int]) -> Optional[float]:
    if not samples:
        return None
    return round(sum(samples) / len(samples), 1)


def _min_date(order: WorkOrder, names: set) -> Optional[date]:
    values = [d for stage, d in order.dates.items() if stage in names]
    return min(values) if values else None


def _cycle_times(orders: Iterable[WorkOrder]):
    total, inco, anti = [], [], []
    for o in orders:
        handoff_inco = o.dates.get(HANDOFF_STAGES[INCO])
        handoff_anti = o.dates.get(HANDOFF_STAGES[ANTI])

        days = _days_between(o.first_date(), handoff_anti)
        if days is not None:
            total.append(days)
        days = _days_between(_min_date(o, _INCO_NAMES), handoff_inco)
        if days is not None:
            inco.append(days)
        days = _days_between(handoff_inco, handoff_anti)
        if days is not None:
            anti.append(days)
    return _average(total), _average(inco), _average(anti)


def dashboard_summary(buckets: Buckets, today: Optional[date] = None) -> dict:
    """
    Contadores do dashboard.

    Atrasadas considera apenas OTs em processo (INCO + ANTI); a lista
    `delayed_orders` traz as OTs atrasadas na ordem de carga. Os tempos
    médios (em dias) saem das OTs despachadas; None quando não há amostra.
    """
    today = today or date.today()
    in_progress = buckets.inco + buckets.anti
    atrasadas = delayed(in_progress, today)
    avg_total, avg_inco, avg_anti = _cycle_times(buckets.archived)
    return {
        "total": buckets.total,
        "in_progress": len(in_progress),
        "completed": len(buckets.archived),
        "by_location": {
            INCO: len(buckets.inco),
            ANTI: len(buckets.anti),
            ARCHIVED: len(buckets.archived),
        },
        "delayed": len(atrasadas),
        "delayed_orders": [o.ot for o in atrasadas],
        "avg_days": {
            "total": avg_total,
            INCO: avg_inco,
            ANTI: avg_anti,
        },
    }


__all__ = [
    "DELAY_THRESHOLD_DAYS",
    "Buckets",
    "partition",
    "is_delayed",
    "delayed",
    "sort_by_progress",
    "dashboard_summary",
]
