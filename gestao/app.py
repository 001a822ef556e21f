import logging
import os
from datetime import date, datetime

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import agenda, birthdays, crud, dashboard, display, financial, pos, printing, schemas
from .auth import (
    FORBIDDEN_MSG,
    create_access_token,
    current_token_id,
    get_current_user,
    require_admin,
    require_page,
    user_from_token_str,
)
from .database import Base, engine, get_db
from .enums import POS_PAYMENT_METHODS, UserRole
from .formatting import format_date, format_datetime, money
from .listing import (
    PRODUCT_NOT_FOUND,
    SEARCH_FIELDS,
    SERVICE_TYPE_NOT_FOUND,
    filter_users,
    index_by_id,
    lookup_name,
    search,
    with_client_names,
)
from .navigation import ENTITY_PAGE, READ_PAGE, SessionContext, can_access
from .rules import is_nominal_quote_transition

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
# Silenciar ruído do passlib
logging.getLogger("passlib").setLevel(logging.ERROR)
log = logging.getLogger(__name__)

app = FastAPI(title="Gestão API")

# CORS (libera tudo em dev se CORS_ORIGINS não estiver definido)
origins_env = os.getenv("CORS_ORIGINS")
origins = [o.strip() for o in origins_env.split(",")] if origins_env else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Criação das tabelas
Base.metadata.create_all(bind=engine)

SAVE_ERROR_MSG = "Erro ao salvar registro"
LOAD_ERROR_MSG = "Erro ao carregar dados"

# entidades com client_id / service_type_id recebem o nome para exibição
CLIENT_LINKED = {"sales", "quotes", "services", "service_orders"}
SERVICE_TYPE_LINKED = {"services", "service_orders"}


def _check_page(user, page: str):
    if not can_access(user.role, page):
        raise HTTPException(status_code=403, detail=FORBIDDEN_MSG)


def _check_entity(entity: str):
    if entity not in crud.ENTITIES:
        raise HTTPException(status_code=404, detail="Recurso não encontrado")


def _load(db: Session, entity: str, sort: str | None = None) -> list:
    try:
        return crud.list_dicts(db, entity, sort)
    except crud.InvalidSortSpec as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (SQLAlchemyError, ValidationError):
        log.exception("falha ao carregar %s", entity)
        raise HTTPException(status_code=500, detail=LOAD_ERROR_MSG)


def _present(db: Session, entity: str, records: list) -> list:
    """Acrescenta os campos de exibição das chaves estrangeiras."""
    if entity in CLIENT_LINKED:
        records = with_client_names(records, index_by_id(_load(db, "clients")))
    if entity in SERVICE_TYPE_LINKED:
        types_index = index_by_id(_load(db, "service_types"))
        records = [
            {**r, "service_type_name": lookup_name(types_index, r.get("service_type_id"), SERVICE_TYPE_NOT_FOUND)}
            for r in records
        ]
    if entity == "sales":
        products_index = index_by_id(_load(db, "products"))
        records = [
            {
                **r,
                "items": [
                    {**it, "name": lookup_name(products_index, it.get("product_id"), PRODUCT_NOT_FOUND)}
                    for it in r.get("items") or []
                ],
            }
            for r in records
        ]
    if entity == "transactions":
        records = financial.with_display_state(records)
    return records


def _save(db: Session, entity: str, fn, *args):
    try:
        return fn(db, entity, *args)
    except crud.EntityNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError:
        db.rollback()
        log.exception("falha ao salvar %s", entity)
        raise HTTPException(status_code=500, detail=SAVE_ERROR_MSG)


def _validate(entity: str, payload: dict, partial: bool):
    spec = crud.ENTITIES[entity]
    try:
        return (spec.update if partial else spec.create).model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


def _session_payload(user) -> dict:
    return SessionContext().start(schemas.UserOut.model_validate(user).model_dump()).to_dict()


def _create_user(db: Session, payload: schemas.UserCreate):
    try:
        return crud.create_user(db, payload)
    except crud.UserExists as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

# ---------------------------
#          HEALTH
# ---------------------------

@app.get("/api/health")
def health():
    return {"status": "ok"}

# ---------------------------
#           AUTH
# ---------------------------

@app.post("/api/auth/login")
def login(payload: schemas.UserLogin, db: Session = Depends(get_db)):
    user = crud.get_user_by_username(db, payload.username)
    if not user or not user.active or not crud.verify_password(payload.password, user.password_hash):
        log.warning("login recusado: %s", payload.username)
        raise HTTPException(status_code=401, detail="Credenciais inválidas")
    token = create_access_token({"sub": user.username})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": {
            "id": user.id,
            "username": user.username,
            "role": user.role,
            "full_name": user.full_name,
        },
        "session": _session_payload(user),
    }


@app.post("/api/auth/register", response_model=schemas.UserOut)
def register(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
):
    # Primeiro usuário pode ser criado sem autenticação (bootstrap)
    if crud.count_users(db) == 0:
        payload = payload.model_copy(update={"role": UserRole.ADMINISTRADOR.value})
    else:
        # Depois, só administrador autenticado pode criar
        admin = user_from_token_str(authorization, db)
        if not admin or admin.role != UserRole.ADMINISTRADOR.value:
            raise HTTPException(
                status_code=403,
                detail="Apenas administradores podem criar usuários após o primeiro.",
            )
    return _create_user(db, payload)


@app.get("/api/auth/me", response_model=schemas.UserOut)
def me(user=Depends(get_current_user)):
    return user


@app.patch("/api/auth/me", response_model=schemas.UserOut)
def update_me(
    payload: schemas.MyUserDataUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    try:
        return crud.update_my_user_data(db, user, payload)
    except SQLAlchemyError:
        db.rollback()
        log.exception("falha ao salvar dados de %s", user.username)
        raise HTTPException(status_code=500, detail=SAVE_ERROR_MSG)


@app.post("/api/auth/logout")
def logout(
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
    jti: str | None = Depends(current_token_id),
):
    if jti:
        crud.revoke_token(db, jti)
    log.info("logout: %s", user.username)
    return {"ok": True}


@app.get("/api/session")
def session(user=Depends(get_current_user)):
    return _session_payload(user)


@app.get("/api/labels")
def labels(_=Depends(get_current_user)):
    return {**display.labels(), "pos_payment_methods": [m.value for m in POS_PAYMENT_METHODS]}

# ---------------------------
#        FUNCIONÁRIOS
# ---------------------------

@app.get("/api/users", response_model=list[schemas.UserOut])
def list_users(
    q: str | None = None,
    role: str | None = None,
    sort: str | None = None,
    db: Session = Depends(get_db),
    _=Depends(require_page("Funcionarios")),
):
    try:
        users = crud.list_users(db, sort)
    except crud.InvalidSortSpec as e:
        raise HTTPException(status_code=400, detail=str(e))
    records = [schemas.UserOut.model_validate(u).model_dump() for u in users]
    return filter_users(records, q, role)


@app.post("/api/users", response_model=schemas.UserOut)
def create_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return _create_user(db, payload)


@app.put("/api/users/{user_id}", response_model=schemas.UserOut)
def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    try:
        return crud.update_user(db, user_id, payload)
    except crud.EntityNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

# ---------------------------
#         DASHBOARD
# ---------------------------

@app.get("/api/dashboard")
def dashboard_view(db: Session = Depends(get_db), _=Depends(require_page("Dashboard"))):
    now = datetime.now()
    sales = _load(db, "sales")
    clients = _load(db, "clients")
    transactions = _load(db, "transactions")
    services = _load(db, "services")
    return {
        "stats": dashboard.stats(sales, clients, transactions, services),
        "pending_financial": dashboard.pending_financial(transactions, now),
        "sales_trend": dashboard.sales_trend(sales, now),
        "products": dashboard.top_products(sales, _load(db, "products")),
        "services": dashboard.top_services(services, _load(db, "service_types")),
        "financial_chart": dashboard.financial_chart(transactions),
    }

# ---------------------------
#         CALENDÁRIO
# ---------------------------

@app.get("/api/calendar")
def calendar_view(
    year: int | None = None,
    month: int | None = Query(None, ge=1, le=12),
    day: date | None = None,
    db: Session = Depends(get_db),
    _=Depends(require_page("Calendario")),
):
    now = datetime.now()
    events = agenda.build_events(
        _load(db, "services"),
        _load(db, "service_orders"),
        _load(db, "transactions"),
        _load(db, "clients"),
        now,
    )
    selected = day or now.date()
    return {
        "day": selected,
        "day_events": agenda.events_on(events, selected),
        "month": agenda.month_grid(events, year or selected.year, month or selected.month),
        "upcoming": agenda.upcoming(events, now),
    }

# ---------------------------
#         FINANCEIRO
# ---------------------------

@app.get("/api/financial/summary")
def financial_summary(db: Session = Depends(get_db), _=Depends(require_page("Financeiro"))):
    transactions = _load(db, "transactions")
    return {
        "summary": financial.summary(transactions),
        "chart": financial.monthly_chart(transactions),
    }


@app.get("/api/financial/transactions")
def financial_transactions(
    type: str = "all",
    status: str = "all",
    category: str = "all",
    date_range: str = Query("all", pattern="^(all|month|week|custom)$"),
    start: date | None = None,
    end: date | None = None,
    q: str | None = None,
    sort: str | None = "-date",
    db: Session = Depends(get_db),
    _=Depends(require_page("Financeiro")),
):
    now = datetime.now()
    transactions = _load(db, "transactions", sort)
    fields, exact = SEARCH_FIELDS["transactions"]
    filtered = financial.apply_filters(
        search(transactions, q, fields, exact),
        type=type, status=status, category=category,
        date_range=date_range, start=start, end=end, today=now.date(),
    )
    return {
        "items": financial.with_display_state(filtered, now),
        "categories": financial.categories(transactions),
        "pending": financial.pending_items(transactions, now),
    }


@app.get("/api/financial/calendar")
def financial_calendar(
    year: int | None = None,
    month: int | None = Query(None, ge=1, le=12),
    day: date | None = None,
    db: Session = Depends(get_db),
    _=Depends(require_page("Financeiro")),
):
    now = datetime.now()
    transactions = _load(db, "transactions")
    selected = day or now.date()
    days = financial.month_days(transactions, year or selected.year, month or selected.month, now)
    return {
        "days": days,
        "markers": financial.day_markers(days),
        "day_transactions": financial.with_display_state(financial.transactions_on(transactions, selected), now),
    }


@app.post("/api/financial/calendar/pdf")
def financial_calendar_pdf(_=Depends(require_page("Financeiro"))):
    return {"message": printing.FINANCIAL_CALENDAR_PDF_MSG}

# ---------------------------
#           PDV
# ---------------------------

@app.get("/api/pos/lookup", response_model=schemas.ProductOut)
def pos_lookup(
    code: str = Query("", max_length=128),
    db: Session = Depends(get_db),
    _=Depends(require_page("PDV")),
):
    product = pos.find_by_code(_load(db, "products"), code.strip())
    if not product:
        raise HTTPException(status_code=404, detail=pos.PRODUCT_NOT_FOUND_MSG)
    return product


@app.post("/api/pos/checkout")
def pos_checkout(
    payload: schemas.CheckoutIn,
    db: Session = Depends(get_db),
    _=Depends(require_page("PDV")),
):
    products = _load(db, "products")
    try:
        cart = pos.cart_from_items(products, [it.model_dump() for it in payload.items])
    except pos.ProductNotFound as e:
        raise HTTPException(status_code=422, detail=e.message)

    def _create_sale(sale: dict):
        # venda e baixa de estoque no mesmo commit
        obj = crud.create_record(db, "sales", schemas.SaleCreate(**sale), commit=False)
        crud.decrease_stock_for_items(db, sale["items"], commit=False)
        db.commit()
        db.refresh(obj)
        log.info("venda criada: id=%s", obj.id)
        return obj

    checkout = pos.Checkout(
        create_sale=_create_sale,
        cart=cart,
        client_id=payload.client_id,
        payment_method=payload.payment_method,
        installments=payload.installments,
    )
    try:
        sale = checkout.finalize()
    except pos.SaleBlocked as e:
        raise HTTPException(status_code=422, detail=e.message)
    except SQLAlchemyError:
        db.rollback()
        log.exception("falha ao finalizar venda")
        raise HTTPException(status_code=500, detail="Erro ao finalizar venda")
    record = crud.to_record("sales", sale)
    return {"message": pos.SALE_DONE_MSG, "sale": record, "total_display": money(record["total"])}

# ---------------------------
#   CLIENTES / RELATÓRIOS
# ---------------------------

@app.get("/api/clients/birthdays")
def clients_birthdays(db: Session = Depends(get_db), _=Depends(require_page("Clientes"))):
    return [
        {**c, "next_birthday_display": format_date(c["next_birthday"])}
        for c in birthdays.upcoming_birthdays(_load(db, "clients"), date.today())
    ]


@app.get("/api/reports/sales.csv")
def report_sales_csv(db: Session = Depends(get_db), _=Depends(require_page("Relatorios"))):
    sales = _present(db, "sales", _load(db, "sales", "-created_date"))
    lines = ["id,data,cliente,pagamento,parcelas,total"]
    for s in sales:
        created = format_datetime(s.get("created_date"))
        client = (s.get("client_name") or "").replace(",", " ")
        lines.append(
            f"{s['id']},{created},{client},{s.get('payment_method') or ''},"
            f"{s.get('installments') or 1},{(s.get('total') or 0):.2f}"
        )
    return Response(
        content="\n".join(lines),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=sales.csv"},
    )

# ---------------------------
#   MUDANÇA DE STATUS
# ---------------------------

@app.post("/api/quotes/{quote_id}/status")
def change_quote_status(
    quote_id: int,
    payload: schemas.QuoteStatusIn,
    db: Session = Depends(get_db),
    _=Depends(require_page("Orcamentos")),
):
    current = _save(db, "quotes", crud.get_record, quote_id)
    previous = current.status
    nominal = is_nominal_quote_transition(previous, payload.status)
    if not nominal:
        log.info("orçamento %s: transição fora do fluxo %s -> %s", quote_id, previous, payload.status.value)
    obj = _save(db, "quotes", crud.update_record, quote_id, schemas.QuoteUpdate(status=payload.status))
    return {"record": crud.to_record("quotes", obj), "previous": previous, "nominal": nominal}


@app.post("/api/transactions/{transaction_id}/status")
def change_transaction_status(
    transaction_id: int,
    payload: schemas.TransactionStatusIn,
    db: Session = Depends(get_db),
    _=Depends(require_page("Financeiro")),
):
    obj = _save(
        db, "transactions", crud.update_record, transaction_id,
        schemas.TransactionUpdate(status=payload.status),
    )
    return _present(db, "transactions", [crud.to_record("transactions", obj)])[0]

# ---------------------------
#   CADASTROS (DINÂMICAS, depois das estáticas)
# ---------------------------

@app.get("/api/{entity}")
def list_entity(
    entity: str,
    sort: str | None = None,
    q: str | None = None,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    _check_entity(entity)
    _check_page(user, READ_PAGE)
    records = _present(db, entity, _load(db, entity, sort))
    fields, exact = SEARCH_FIELDS[entity]
    return search(records, q, fields, exact)


@app.get("/api/{entity}/{record_id}")
def get_entity(
    entity: str,
    record_id: int,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    _check_entity(entity)
    _check_page(user, READ_PAGE)
    obj = _save(db, entity, crud.get_record, record_id)
    return _present(db, entity, [crud.to_record(entity, obj)])[0]


@app.post("/api/{entity}")
def create_entity(
    entity: str,
    payload: dict,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    _check_entity(entity)
    _check_page(user, ENTITY_PAGE[entity])
    data = _validate(entity, payload, partial=False)
    obj = _save(db, entity, crud.create_record, data)
    return crud.to_record(entity, obj)


@app.put("/api/{entity}/{record_id}")
def update_entity(
    entity: str,
    record_id: int,
    payload: dict,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    _check_entity(entity)
    _check_page(user, ENTITY_PAGE[entity])
    data = _validate(entity, payload, partial=True)
    obj = _save(db, entity, crud.update_record, record_id, data)
    return crud.to_record(entity, obj)


@app.post("/api/{entity}/{record_id}/{action}")
def print_entity(
    entity: str,
    record_id: int,
    action: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    _check_entity(entity)
    if not printing.supports(entity, action):
        raise HTTPException(status_code=404, detail="Recurso não encontrado")
    _check_page(user, ENTITY_PAGE[entity])
    obj = _save(db, entity, crud.get_record, record_id)
    return {"message": printing.placeholder_message(entity, action, crud.to_record(entity, obj))}
