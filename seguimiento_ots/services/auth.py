# -*- coding: utf-8 -*-
"""Contexto de sessão passado explicitamente para os serviços de OT."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask_login import current_user

from seguimiento_ots.errors import Unauthorized


@dataclass(frozen=True)
class SessionContext:
    user_id: Optional[int] = None
    username: str = ""

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = SessionContext()


def session_from_current_user() -> SessionContext:
    """Monta o contexto a partir do usuário logado no Flask-Login."""
    if not current_user.is_authenticated:
        return ANONYMOUS
    return SessionContext(user_id=current_user.id, username=current_user.username)


def require_session(ctx: Optional[SessionContext]) -> SessionContext:
    if ctx is None or not ctx.is_authenticated:
        raise Unauthorized()
    return ctx
