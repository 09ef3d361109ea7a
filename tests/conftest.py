from __future__ import annotations

import pytest

from seguimiento_ots import create_app, db
from seguimiento_ots.models_sqla import Usuario
from seguimiento_ots.services.auth import SessionContext


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def user(app) -> Usuario:
    usuario = Usuario(username="operador", email="operador@planta.example")
    usuario.set_password("clave-segura")
    db.session.add(usuario)
    db.session.commit()
    return usuario


@pytest.fixture
def ctx(user) -> SessionContext:
    return SessionContext(user_id=user.id, username=user.username)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client, user):
    resp = client.post(
        "/auth/login", json={"usuario": "operador", "senha": "clave-segura"}
    )
    assert resp.status_code == 200
    return client
