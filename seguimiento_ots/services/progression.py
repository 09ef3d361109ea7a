# -*- coding: utf-8 -*-
"""
seguimiento_ots/services/progression.py

Regras de avanço de uma OT quando uma data de etapa é registrada.
- next_derived(order, stage, date)      → novos status/progress/location (ou None).
- apply_stage_date(order, stage, date)  → aplica a data e os campos derivados no snapshot.

O fluxo só anda para frente: limpar uma data nunca volta status, progresso
ou localização.
"""
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import NamedTuple, Optional

from seguimiento_ots.models import ARCHIVED, LOCATION_ORDER, WorkOrder, location_rank
from seguimiento_ots.services.stage_catalog import HANDOFF_STAGES, index_of, stages_for

logger = logging.getLogger(__name__)


class DerivedFields(NamedTuple):
    status: str
    progress: int
    location: str


def _next_location(location: str, stage: str) -> str:
    # a etapa de passagem leva à localização seguinte em LOCATION_ORDER
    if HANDOFF_STAGES.get(location) == stage:
        return LOCATION_ORDER[location_rank(location) + 1]
    return location


def next_derived(
    order: WorkOrder, stage: str, date: Optional[date_type]
) -> Optional[DerivedFields]:
    """
    Calcula os campos derivados para "registrar `date` na etapa `stage`".
    Retorna None quando nada muda:
      - data vazia (limpeza);
      - OT arquivada (terminal);
      - etapa fora do pipeline da localização atual.
    """
    if not date:
        return None
    if order.location == ARCHIVED:
        return None

    stages = stages_for(order.location)
    i = index_of(stages, stage)
    if i is None:
        logger.debug(
            f"[progression] Etapa '{stage}' fora do pipeline {order.location} (ot={order.ot})"
        )
        return None

    return DerivedFields(
        status=stage,
        progress=stages[i].progress,
        location=_next_location(order.location, stage),
    )


def apply_stage_date(
    order: WorkOrder, stage: str, date: Optional[date_type]
) -> Optional[DerivedFields]:
    """Aplica a data no snapshot em memória e retorna os derivados aplicados."""
    if date:
        order.dates[stage] = date
    else:
        order.dates.pop(stage, None)

    derived = next_derived(order, stage, date)
    if derived is not None:
        order.status, order.progress, order.location = derived
    return derived


__all__ = ["DerivedFields", "next_derived", "apply_stage_date"]
