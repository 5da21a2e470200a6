"""
Request identity

Authentication happens upstream; the gateway forwards the authenticated
user id in the X-User-Id header and every query is scoped by it.
"""
from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> UUID:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Usuário não autenticado")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Identificador de usuário inválido")
