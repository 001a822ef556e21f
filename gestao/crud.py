from __future__ import annotations

import logging
from collections import namedtuple
from typing import List, Optional

from passlib.context import CryptContext
from sqlalchemy import JSON, select
from sqlalchemy.orm import Session

from . import models, schemas

log = logging.getLogger(__name__)

# pbkdf2_sha256: sem limite de 72 bytes e sem depender do backend bcrypt
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class EntityNotFound(LookupError):
    pass


class InvalidSortSpec(ValueError):
    pass


class UserExists(ValueError):
    pass


# =========================
# Registro de entidades
# =========================

EntitySpec = namedtuple("EntitySpec", "model create update out")

ENTITIES = {
    "clients": EntitySpec(models.Client, schemas.ClientCreate, schemas.ClientUpdate, schemas.ClientOut),
    "products": EntitySpec(models.Product, schemas.ProductCreate, schemas.ProductUpdate, schemas.ProductOut),
    "sales": EntitySpec(models.Sale, schemas.SaleCreate, schemas.SaleUpdate, schemas.SaleOut),
    "transactions": EntitySpec(
        models.Transaction, schemas.TransactionCreate, schemas.TransactionUpdate, schemas.TransactionOut
    ),
    "quotes": EntitySpec(models.Quote, schemas.QuoteCreate, schemas.QuoteUpdate, schemas.QuoteOut),
    "service_types": EntitySpec(
        models.ServiceType, schemas.ServiceTypeCreate, schemas.ServiceTypeUpdate, schemas.ServiceTypeOut
    ),
    "services": EntitySpec(models.Service, schemas.ServiceCreate, schemas.ServiceUpdate, schemas.ServiceOut),
    "service_orders": EntitySpec(
        models.ServiceOrder, schemas.ServiceOrderCreate, schemas.ServiceOrderUpdate, schemas.ServiceOrderOut
    ),
}


def _json_columns(model) -> set[str]:
    return {c.name for c in model.__table__.columns if isinstance(c.type, JSON)}


def _values(model, payload, partial: bool) -> dict:
    """Converte o schema em valores de coluna; colunas JSON recebem a forma serializável."""
    values = payload.model_dump(exclude_unset=partial)
    json_cols = _json_columns(model)
    if json_cols & values.keys():
        as_json = payload.model_dump(mode="json", exclude_unset=partial)
        for name in json_cols & values.keys():
            values[name] = as_json[name]
    return values


def parse_sort_spec(model, sort: str | None):
    """'-date' -> date desc; 'name' -> name asc; vazio -> id asc."""
    if not sort:
        return model.id.asc()
    desc = sort.startswith("-")
    field = sort.lstrip("-+").strip()
    column = model.__table__.columns.get(field)
    if column is None:
        raise InvalidSortSpec(f"Campo de ordenação inválido: {field}")
    attr = getattr(model, field)
    return attr.desc() if desc else attr.asc()


def to_record(entity: str, obj) -> dict:
    return ENTITIES[entity].out.model_validate(obj).model_dump()


# =========================
# list / create / update
# =========================

def list_records(db: Session, entity: str, sort: str | None = None) -> list:
    model = ENTITIES[entity].model
    order = parse_sort_spec(model, sort)
    return db.execute(select(model).order_by(order, model.id.asc())).scalars().all()


def list_dicts(db: Session, entity: str, sort: str | None = None) -> List[dict]:
    return [to_record(entity, obj) for obj in list_records(db, entity, sort)]


def get_record(db: Session, entity: str, record_id: int):
    obj = db.get(ENTITIES[entity].model, record_id)
    if obj is None:
        raise EntityNotFound(f"{entity} {record_id} não encontrado")
    return obj


def create_record(db: Session, entity: str, payload, commit: bool = True) -> object:
    spec = ENTITIES[entity]
    obj = spec.model(**_values(spec.model, payload, partial=False))
    db.add(obj)
    if not commit:
        db.flush()
        return obj
    db.commit()
    db.refresh(obj)
    log.info("%s criado: id=%s", entity, obj.id)
    return obj


def update_record(db: Session, entity: str, record_id: int, payload) -> object:
    spec = ENTITIES[entity]
    obj = get_record(db, entity, record_id)
    for name, value in _values(spec.model, payload, partial=True).items():
        setattr(obj, name, value)
    db.commit()
    db.refresh(obj)
    log.info("%s atualizado: id=%s", entity, obj.id)
    return obj


# =========================
# Estoque
# =========================

def decrease_stock_for_items(db: Session, items, commit: bool = True) -> None:
    """Baixa o estoque dos produtos vendidos; produto removido é ignorado."""
    for it in items:
        prod = db.get(models.Product, it["product_id"])
        if not prod:
            continue
        # (sem bloqueio de estoque negativo)
        prod.stock = float(prod.stock or 0) - float(it["quantity"])
    if commit:
        db.commit()


# =========================
# Users
# =========================

def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Senha obrigatória")
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    return db.execute(
        select(models.User).where(models.User.username == username)
    ).scalar_one_or_none()


def get_user(db: Session, user_id: int) -> models.User:
    u = db.get(models.User, user_id)
    if u is None:
        raise EntityNotFound(f"usuário {user_id} não encontrado")
    return u


def count_users(db: Session) -> int:
    return db.query(models.User).count()


def list_users(db: Session, sort: str | None = None) -> list[models.User]:
    order = parse_sort_spec(models.User, sort) if sort else models.User.full_name.asc()
    return db.execute(select(models.User).order_by(order, models.User.id.asc())).scalars().all()


def create_user(db: Session, data: schemas.UserCreate) -> models.User:
    if get_user_by_username(db, data.username):
        raise UserExists("Usuário já existe.")
    values = data.model_dump(exclude={"password"})
    u = models.User(**values, password_hash=hash_password(data.password))
    db.add(u)
    db.commit()
    db.refresh(u)
    log.info("usuário criado: %s (%s)", u.username, u.role)
    return u


def update_user(db: Session, user_id: int, data: schemas.UserUpdate) -> models.User:
    """Atualiza apenas os campos enviados no payload."""
    u = get_user(db, user_id)
    incoming = data.model_dump(exclude_unset=True)
    password = incoming.pop("password", None)
    for name, value in incoming.items():
        if value is not None:
            setattr(u, name, value)
    if password:
        u.password_hash = hash_password(password)
    db.commit()
    db.refresh(u)
    return u


def update_my_user_data(db: Session, user: models.User, data: schemas.MyUserDataUpdate) -> models.User:
    for name, value in data.model_dump(mode="json", exclude_unset=True).items():
        setattr(user, name, value)
    db.commit()
    db.refresh(user)
    return user


# =========================
# Logout (tokens revogados)
# =========================

def revoke_token(db: Session, jti: str) -> None:
    if not db.get(models.RevokedToken, jti):
        db.add(models.RevokedToken(jti=jti))
        db.commit()


def is_token_revoked(db: Session, jti: str | None) -> bool:
    if not jti:
        return False
    return db.get(models.RevokedToken, jti) is not None
