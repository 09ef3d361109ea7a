# seguimiento_ots/routes/dashboard_routes/dashboard_api.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from seguimiento_ots.services import work_order_service
from seguimiento_ots.services.auth import session_from_current_user
from seguimiento_ots.services.bucketing import dashboard_summary

dashboard_api_bp = Blueprint(
    "dashboard_api_bp", __name__, url_prefix="/dashboard/api"
)

MAX_HISTORY = 100


@dashboard_api_bp.get("/summary")
@login_required
def summary():
    """Contadores: total, em processo, despachadas, atrasadas e tempos médios."""
    buckets = work_order_service.load_board(session_from_current_user())
    return jsonify({"ok": True, **dashboard_summary(buckets)})


@dashboard_api_bp.get("/history")
@login_required
def history():
    """Atividade recente (sem os campos derivados status/progress)."""
    limit = request.args.get("limit", type=int) or current_app.config["OT_HISTORY_LIMIT"]
    limit = max(1, min(limit, MAX_HISTORY))
    entries = work_order_service.recent_history(session_from_current_user(), limit)
    return jsonify({"ok": True, "history": [e.as_dict() for e in entries]})
