import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from . import crud, models
from .database import get_db
from .enums import UserRole
from .navigation import can_access

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "360"))

FORBIDDEN_MSG = "Sem permissão para acessar esta seção."


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    # jti permite invalidar o token no logout
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(authorization: str | None) -> dict | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def user_from_token_str(authorization: str | None, db: Session) -> models.User | None:
    payload = decode_token(authorization)
    if not payload or not payload.get("sub"):
        return None
    if crud.is_token_revoked(db, payload.get("jti")):
        return None
    user = crud.get_user_by_username(db, payload["sub"])
    if user is None or not user.active:
        return None
    return user


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> models.User:
    user = user_from_token_str(authorization, db)
    if not user:
        raise HTTPException(status_code=401, detail="Não autenticado", headers={"WWW-Authenticate": "Bearer"})
    return user


def current_token_id(authorization: str | None = Header(default=None)) -> str | None:
    payload = decode_token(authorization)
    return payload.get("jti") if payload else None


def require_page(page: str):
    """Dependência: o papel do usuário precisa enxergar a seção ``page``."""
    def _inner(user: models.User = Depends(get_current_user)) -> models.User:
        if not can_access(user.role, page):
            raise HTTPException(status_code=403, detail=FORBIDDEN_MSG)
        return user
    return _inner


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    if user.role != UserRole.ADMINISTRADOR.value:
        raise HTTPException(status_code=403, detail="Apenas administradores")
    return user
