# -*- coding: utf-8 -*-
"""
seguimiento_ots/services/work_order_service.py

Operações de OT usadas pelas rotas. Toda operação recebe o SessionContext
explicitamente e, depois de qualquer escrita, recarrega o conjunto inteiro
de OTs (sem patch incremental).

- load_board(ctx)                                   → Buckets(inco, anti, archived)
- create_work_order(ctx, ot, client, tag, desc)     → Buckets
- record_stage_date(ctx, ot, stage, date)           → Buckets
- edit_work_order(ctx, ot, changes)                 → Buckets
- recent_history(ctx, limit)                        → List[HistoryEntry]
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Mapping, Optional, Union

from seguimiento_ots.errors import (
    ArchivedOrderError,
    StorageError,
    ValidationError,
)
from seguimiento_ots.models import HistoryEntry
from seguimiento_ots.services import work_order_store as store
from seguimiento_ots.services.auth import SessionContext, require_session
from seguimiento_ots.services.bucketing import Buckets, partition
from seguimiento_ots.services.progression import next_derived
from seguimiento_ots.services.stage_catalog import is_known_stage

logger = logging.getLogger(__name__)


def text_field(name: str, value) -> str:
    """Texto de entrada (JSON/form) sem espaços nas pontas; None vira vazio."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"El campo {name!r} debe ser texto")
    return value.strip()


def parse_stage_date(value: Union[str, date, None]) -> Optional[date]:
    """Aceita 'YYYY-MM-DD', date ou vazio (vazio = limpar a data)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Fecha inválida: {value!r} (formato AAAA-MM-DD)") from None


def load_board(ctx: SessionContext) -> Buckets:
    require_session(ctx)
    return partition(store.list_work_orders())


def create_work_order(
    ctx: SessionContext,
    ot: str,
    client: str = "",
    tag: str = "",
    description: str = "",
) -> Buckets:
    require_session(ctx)
    ot = text_field("ot", ot)
    if not ot:
        raise ValidationError("El número de OT es obligatorio")

    store.insert_work_order(
        {
            "ot": ot,
            "client": text_field("client", client),
            "tag": text_field("tag", tag),
            "description": text_field("description", description),
        },
        ctx.user_id,
    )
    store.commit()
    logger.info(f"[ots] OT criada: {ot} por {ctx.username}")
    return load_board(ctx)


def record_stage_date(
    ctx: SessionContext, ot: str, stage: str, value: Union[str, date, None]
) -> Buckets:
    """
    Registra (ou limpa) a data de uma etapa e avança a OT conforme o fluxo.
    Data e campos derivados são confirmados juntos; em falha nada é gravado
    e o chamador deve recarregar.
    """
    require_session(ctx)
    stage = text_field("stage", stage)
    if not is_known_stage(stage):
        raise ValidationError(f"Etapa desconocida: {stage!r}")
    when = parse_stage_date(value)

    order = store.get_work_order(ot)
    if order.is_archived:
        logger.warning(f"[ots] Data recusada para OT despachada: {ot} ({stage})")
        raise ArchivedOrderError(f"La OT {ot} ya fue despachada")

    derived = next_derived(order, stage, when)
    try:
        store.upsert_stage_date(order.id, stage, when, ctx.user_id)
        if derived is not None:
            store.update_work_order_derived(order.id, derived, ctx.user_id)
        store.commit()
    except StorageError:
        store.rollback()
        raise

    if derived is None:
        logger.info(f"[ots] {ot}: data de '{stage}' = {when} (sem mudança de status)")
    else:
        logger.info(
            f"[ots] {ot}: '{stage}' em {when} -> status={derived.status} "
            f"progress={derived.progress} location={derived.location}"
        )
    return load_board(ctx)


def edit_work_order(
    ctx: SessionContext, ot: str, changes: Mapping[str, str]
) -> Buckets:
    """Edita client/tag/description; status e progresso não passam por aqui."""
    require_session(ctx)
    allowed = set(store.EDITABLE_FIELDS)
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Campos no editables: {', '.join(sorted(unknown))}")
    if not changes:
        return load_board(ctx)

    order = store.get_work_order(ot)
    store.update_work_order_fields(
        order.id, {k: text_field(k, v) for k, v in changes.items()}, ctx.user_id
    )
    store.commit()
    logger.info(f"[ots] OT editada: {ot} campos={sorted(changes)}")
    return load_board(ctx)


def recent_history(ctx: SessionContext, limit: int = 10) -> List[HistoryEntry]:
    require_session(ctx)
    return store.list_recent_history(limit)


__all__ = [
    "text_field",
    "parse_stage_date",
    "load_board",
    "create_work_order",
    "record_stage_date",
    "edit_work_order",
    "recent_history",
]
