# seguimiento_ots/routes/ot_routes/work_order_api.py
from datetime import date

from flask import Blueprint, jsonify, request
from flask_login import login_required

from seguimiento_ots.errors import ValidationError
from seguimiento_ots.services import work_order_service
from seguimiento_ots.services.auth import session_from_current_user
from seguimiento_ots.services.bucketing import Buckets, is_delayed, sort_by_progress
from seguimiento_ots.services.stage_catalog import catalog_as_dict

ot_api_bp = Blueprint("ot_api_bp", __name__, url_prefix="/ots/api")


def _payload() -> dict:
    dados = request.get_json(silent=True)
    if dados is None:
        return request.form.to_dict()
    if not isinstance(dados, dict):
        raise ValidationError("El cuerpo debe ser un objeto JSON")
    return dados


def _order_json(order, today: date) -> dict:
    data = order.as_dict()
    data["delayed"] = is_delayed(order, today)
    return data


def _board_json(buckets: Buckets) -> dict:
    """Cada tabela vem ordenada por progresso (desc), como nas telas."""
    today = date.today()
    return {
        "inco": [_order_json(o, today) for o in sort_by_progress(buckets.inco)],
        "anti": [_order_json(o, today) for o in sort_by_progress(buckets.anti)],
        "archived": [_order_json(o, today) for o in sort_by_progress(buckets.archived)],
    }


@ot_api_bp.get("/ping")
def ping():
    """Healthcheck simples do serviço de OTs."""
    return jsonify({"ok": True, "service": "ot_api"})


@ot_api_bp.get("/stages")
def stages():
    return jsonify(catalog_as_dict())


@ot_api_bp.get("/board")
@login_required
def board():
    buckets = work_order_service.load_board(session_from_current_user())
    return jsonify({"ok": True, **_board_json(buckets)})


@ot_api_bp.post("/")
@login_required
def create():
    dados = _payload()
    buckets = work_order_service.create_work_order(
        session_from_current_user(),
        ot=dados.get("ot") or "",
        client=dados.get("client") or "",
        tag=dados.get("tag") or "",
        description=dados.get("description") or "",
    )
    return jsonify({"ok": True, **_board_json(buckets)}), 201


@ot_api_bp.post("/<ot>/dates")
@login_required
def set_stage_date(ot):
    dados = _payload()
    stage = work_order_service.text_field("stage", dados.get("stage"))
    if not stage:
        raise ValidationError("La etapa es obligatoria")

    buckets = work_order_service.record_stage_date(
        session_from_current_user(), ot, stage, dados.get("date")
    )
    return jsonify({"ok": True, **_board_json(buckets)})


@ot_api_bp.patch("/<ot>")
@login_required
def edit(ot):
    dados = _payload()
    buckets = work_order_service.edit_work_order(
        session_from_current_user(), ot, dados
    )
    return jsonify({"ok": True, **_board_json(buckets)})
