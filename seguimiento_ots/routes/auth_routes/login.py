from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from seguimiento_ots import db, login_manager
from seguimiento_ots.errors import Unauthorized, ValidationError
from seguimiento_ots.models_sqla import Usuario
from seguimiento_ots.services.work_order_service import text_field

login_bp = Blueprint("login_bp", __name__, url_prefix="/auth")


def _payload() -> dict:
    dados = request.get_json(silent=True)
    if dados is None:
        return request.form.to_dict()
    if not isinstance(dados, dict):
        raise ValidationError("El cuerpo debe ser un objeto JSON")
    return dados


def _senha(dados: dict, campo: str) -> str:
    # senha não é normalizada (sem strip)
    valor = dados.get(campo) or ""
    if not isinstance(valor, str):
        raise ValidationError(f"El campo {campo!r} debe ser texto")
    return valor


def _session_json():
    if not current_user.is_authenticated:
        return {"authenticated": False, "user": None}
    return {
        "authenticated": True,
        "user": {
            "id": current_user.id,
            "username": current_user.username,
            "email": current_user.email,
        },
    }


@login_manager.unauthorized_handler
def _nao_autenticado():
    return jsonify({"ok": False, "error": str(Unauthorized())}), 401


@login_bp.get("/session")
def session():
    return jsonify(_session_json())


@login_bp.post("/login")
def login():
    dados = _payload()
    usuario_form = text_field("usuario", dados.get("usuario"))
    senha_form = _senha(dados, "senha")

    user = Usuario.query.filter_by(username=usuario_form).first()

    # Verifica se existe e se a senha bate
    if user and user.check_password(senha_form) and user.is_active:
        login_user(user)
        return jsonify({"ok": True, **_session_json()})

    return jsonify({"ok": False, "error": "Usuario o contraseña incorrectos."}), 401


@login_bp.post("/registro")
def registro():
    """
    Cadastro de novos usuários.
    Campos: usuario, senha, confirmar_senha, email (opcional).
    """
    dados = _payload()
    usuario_form = text_field("usuario", dados.get("usuario"))
    senha_form = _senha(dados, "senha")
    confirmar_senha = _senha(dados, "confirmar_senha")

    # Validações simples
    erro = None
    if not usuario_form or not senha_form:
        erro = "Complete todos los campos."
    elif senha_form != confirmar_senha:
        erro = "Las contraseñas no coinciden."
    elif Usuario.query.filter_by(username=usuario_form).first():
        return jsonify({"ok": False, "error": "Este nombre de usuario ya existe."}), 409

    if erro:
        return jsonify({"ok": False, "error": erro}), 400

    email = text_field("email", dados.get("email")) or None
    novo_usuario = Usuario(username=usuario_form, email=email)
    novo_usuario.set_password(senha_form)
    db.session.add(novo_usuario)
    db.session.commit()

    return jsonify({"ok": True, "id": novo_usuario.id}), 201


@login_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True, "authenticated": False})
