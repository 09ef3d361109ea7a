# -*- coding: utf-8 -*-
"""
seguimiento_ots/services/work_order_store.py

Acesso ao banco para OTs, datas de etapa e histórico de mudanças.
Funções públicas:
- list_work_orders()                                      → snapshots com datas, mais recentes primeiro.
- get_work_order(ot)                                      → snapshot ou NotFound.
- insert_work_order(fields, actor_id)                     → nova OT (Conflict se `ot` repetida).
- upsert_stage_date(work_order_id, stage, date, actor_id) → grava/limpa a data da etapa.
- update_work_order_derived(work_order_id, derived, actor_id)
- update_work_order_fields(work_order_id, changes, actor_id)
- list_recent_history(limit)                              → feed sem status/progress.
- commit()                                                → confirma a operação.

Toda mudança gera uma linha em work_order_history. As escritas ficam
pendentes na sessão até commit(); o chamador decide o momento.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from seguimiento_ots import db
from seguimiento_ots.errors import Conflict, NotFound, StorageError
from seguimiento_ots.models import INCO, HistoryEntry, WorkOrder
from seguimiento_ots.models_sqla import (
    OTWorkOrder,
    OTWorkOrderDate,
    OTWorkOrderHistory,
    Usuario,
)

logger = logging.getLogger(__name__)

# Campos derivados ficam no histórico mas não aparecem no feed
HIDDEN_HISTORY_FIELDS = ("status", "progress")
EDITABLE_FIELDS = ("client", "description", "tag")
UNKNOWN_USER = "Usuario desconocido"


@contextmanager
def _storage_guard(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[store] Falha em {action}: {e}")
        raise StorageError(f"Error al {action}: {e}") from e


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _log_change(
    work_order_id: int, field: str, old, new, actor_id: Optional[int]
) -> None:
    old_txt, new_txt = _as_text(old), _as_text(new)
    if old_txt == new_txt:
        return
    db.session.add(
        OTWorkOrderHistory(
            work_order_id=work_order_id,
            field=field,
            old_value=old_txt,
            new_value=new_txt,
            changed_by=actor_id,
            changed_at=datetime.utcnow(),
        )
    )


def _to_domain(row: OTWorkOrder) -> WorkOrder:
    return WorkOrder(
        id=row.id,
        ot=row.ot,
        client=row.client or "",
        description=row.description or "",
        tag=row.tag or "",
        status=row.status or "",
        progress=row.progress or 0,
        location=row.location,
        # Datas limpas ficam como NULL no banco e não entram no snapshot
        dates={d.stage: d.date for d in row.dates if d.date is not None},
        created_at=row.created_at,
    )


def _get_row(work_order_id: int) -> OTWorkOrder:
    row = db.session.get(OTWorkOrder, work_order_id)
    if row is None:
        raise NotFound(f"Orden de trabajo no encontrada (id={work_order_id})")
    return row


# ---------------------------------------------------------------------
# Leitura
# ---------------------------------------------------------------------
def list_work_orders() -> List[WorkOrder]:
    with _storage_guard("cargar las órdenes de trabajo"):
        rows = db.session.scalars(
            select(OTWorkOrder).order_by(
                OTWorkOrder.created_at.desc(), OTWorkOrder.id.desc()
            )
        ).all()
        return [_to_domain(r) for r in rows]


def get_work_order(ot: str) -> WorkOrder:
    with _storage_guard("cargar la orden de trabajo"):
        row = db.session.scalars(
            select(OTWorkOrder).where(OTWorkOrder.ot == ot)
        ).first()
    if row is None:
        raise NotFound(f"Orden de trabajo no encontrada: {ot}")
    return _to_domain(row)


def list_recent_history(limit: int = 10) -> List[HistoryEntry]:
    with _storage_guard("cargar el historial"):
        rows = db.session.execute(
            select(OTWorkOrderHistory, OTWorkOrder.ot, Usuario.email, Usuario.username)
            .join(OTWorkOrder, OTWorkOrder.id == OTWorkOrderHistory.work_order_id)
            .outerjoin(Usuario, Usuario.id == OTWorkOrderHistory.changed_by)
            .where(OTWorkOrderHistory.field.not_in(HIDDEN_HISTORY_FIELDS))
            .order_by(OTWorkOrderHistory.changed_at.desc(), OTWorkOrderHistory.id.desc())
            .limit(limit)
        ).all()

    return [
        HistoryEntry(
            timestamp=h.changed_at,
            ot=ot,
            field=h.field,
            old_value=h.old_value,
            new_value=h.new_value,
            actor=email or username or UNKNOWN_USER,
        )
        for h, ot, email, username in rows
    ]


# ---------------------------------------------------------------------
# Escrita (pendente até commit())
# ---------------------------------------------------------------------
def insert_work_order(fields: Mapping[str, str], actor_id: Optional[int]) -> WorkOrder:
    ot = fields["ot"]
    now = datetime.utcnow()
    row = OTWorkOrder(
        ot=ot,
        client=fields.get("client") or "",
        tag=fields.get("tag") or "",
        description=fields.get("description") or "",
        status="",
        progress=0,
        location=INCO,
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )
    try:
        db.session.add(row)
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"[store] OT duplicada: {ot}")
        raise Conflict(f"Ya existe una orden de trabajo con OT {ot}") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[store] Falha ao inserir OT {ot}: {e}")
        raise StorageError(f"Error al crear la orden de trabajo: {e}") from e

    with _storage_guard("registrar el historial"):
        _log_change(row.id, "ot", None, ot, actor_id)
    return _to_domain(row)


def upsert_stage_date(
    work_order_id: int, stage: str, value: Optional[date], actor_id: Optional[int]
) -> None:
    with _storage_guard("guardar la fecha"):
        order = _get_row(work_order_id)
        now = datetime.utcnow()
        existing = db.session.scalars(
            select(OTWorkOrderDate).where(
                OTWorkOrderDate.work_order_id == work_order_id,
                OTWorkOrderDate.stage == stage,
            )
        ).first()

        old = existing.date if existing else None
        if existing:
            existing.date = value
            existing.updated_by = actor_id
            existing.updated_at = now
        else:
            db.session.add(
                OTWorkOrderDate(
                    work_order_id=work_order_id,
                    stage=stage,
                    date=value,
                    created_by=actor_id,
                    updated_by=actor_id,
                    created_at=now,
                    updated_at=now,
                )
            )

        _log_change(work_order_id, stage, old, value, actor_id)
        order.updated_by = actor_id
        order.updated_at = now
        db.session.flush()
        # Mantém a coleção carregada em sincronia com a linha nova/alterada
        db.session.expire(order, ["dates"])


def update_work_order_derived(work_order_id: int, derived, actor_id: Optional[int]) -> None:
    """Grava status/progress/location (único caminho de escrita desses campos)."""
    with _storage_guard("actualizar la orden de trabajo"):
        order = _get_row(work_order_id)
        for field in ("status", "progress", "location"):
            new = getattr(derived, field)
            _log_change(work_order_id, field, getattr(order, field), new, actor_id)
            setattr(order, field, new)
        order.updated_by = actor_id
        order.updated_at = datetime.utcnow()
        db.session.flush()


def update_work_order_fields(
    work_order_id: int, changes: Mapping[str, str], actor_id: Optional[int]
) -> None:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Campos não editáveis: {sorted(unknown)}")

    with _storage_guard("actualizar la orden de trabajo"):
        order = _get_row(work_order_id)
        for field, new in changes.items():
            _log_change(work_order_id, field, getattr(order, field), new, actor_id)
            setattr(order, field, new)
        order.updated_by = actor_id
        order.updated_at = datetime.utcnow()
        db.session.flush()


def commit() -> None:
    with _storage_guard("confirmar los cambios"):
        db.session.commit()


def rollback() -> None:
    db.session.rollback()


__all__ = [
    "list_work_orders",
    "get_work_order",
    "list_recent_history",
    "insert_work_order",
    "upsert_stage_date",
    "update_work_order_derived",
    "update_work_order_fields",
    "commit",
    "rollback",
]
