"""SQLAlchemy models for the work-order store.

Tables:
    usuarios              - accounts used by Flask-Login
    work_orders           - one row per OT (derived fields included)
    work_order_dates      - one row per (OT, stage); NULL date means cleared
    work_order_history    - row-level change log (field, old, new, actor)

Usage:
    from seguimiento_ots import db
    from seguimiento_ots.models_sqla import OTWorkOrder, OTWorkOrderDate

The ``db`` object must be initialized by calling ``db.init_app(app)``
in the application factory (this already happens in ``create_app()``).
Domain code should not touch these classes directly; go through
``seguimiento_ots.services.work_order_store``.
"""

from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from seguimiento_ots import db, login_manager

# ============================
# Usuários
# ============================


class Usuario(UserMixin, db.Model):
    __tablename__ = "usuarios"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True)
    email = db.Column(db.String(120), nullable=True)
    password_hash = db.Column(db.String(256), nullable=True)
    is_active_user = db.Column(db.Boolean, nullable=False, default=True)

    @property
    def is_active(self) -> bool:
        return bool(self.is_active_user)

    def set_password(self, senha: str) -> None:
        self.password_hash = generate_password_hash(senha)

    def check_password(self, senha: str) -> bool:
        if not self.password_hash or not senha:
            return False
        return check_password_hash(self.password_hash, senha)

    def __repr__(self) -> str:
        return f"<Usuario {self.username}>"


@login_manager.user_loader
def _load_user(user_id: str):
    return db.session.get(Usuario, int(user_id))


# ============================
# OTs
# ============================


class OTWorkOrder(db.Model):
    __tablename__ = "work_orders"

    id = db.Column(db.Integer, primary_key=True)
    ot = db.Column(db.String(64), nullable=False, unique=True)
    client = db.Column(db.String(120), nullable=False, default="")
    description = db.Column(db.Text, nullable=False, default="")
    tag = db.Column(db.String(64), nullable=False, default="")
    status = db.Column(db.String(64), nullable=False, default="")
    progress = db.Column(db.Integer, nullable=False, default=0)
    location = db.Column(db.String(10), nullable=False, default="INCO")
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_by = db.Column(db.Integer, db.ForeignKey("usuarios.id"), nullable=True)
    updated_by = db.Column(db.Integer, db.ForeignKey("usuarios.id"), nullable=True)

    dates = db.relationship(
        "OTWorkOrderDate",
        backref="work_order",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class OTWorkOrderDate(db.Model):
    __tablename__ = "work_order_dates"
    __table_args__ = (
        db.UniqueConstraint("work_order_id", "stage", name="uq_work_order_stage"),
    )

    id = db.Column(db.Integer, primary_key=True)
    work_order_id = db.Column(
        db.Integer, db.ForeignKey("work_orders.id"), nullable=False
    )
    stage = db.Column(db.String(64), nullable=False)
    date = db.Column(db.Date, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_by = db.Column(db.Integer, db.ForeignKey("usuarios.id"), nullable=True)
    updated_by = db.Column(db.Integer, db.ForeignKey("usuarios.id"), nullable=True)


class OTWorkOrderHistory(db.Model):
    __tablename__ = "work_order_history"

    id = db.Column(db.Integer, primary_key=True)
    work_order_id = db.Column(
        db.Integer, db.ForeignKey("work_orders.id"), nullable=False
    )
    field = db.Column(db.String(64), nullable=False)
    old_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)
    changed_by = db.Column(db.Integer, db.ForeignKey("usuarios.id"), nullable=True)
    changed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


__all__ = [
    "Usuario",
    "OTWorkOrder",
    "OTWorkOrderDate",
    "OTWorkOrderHistory",
]
