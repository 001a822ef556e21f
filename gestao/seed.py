import logging
from datetime import date

from sqlalchemy.orm import Session

from . import crud, schemas
from .database import Base, SessionLocal, engine
from .enums import UserRole
from .models import Client, Product, ServiceType, User

logging.getLogger("passlib").setLevel(logging.ERROR)
log = logging.getLogger(__name__)

# cria as tabelas antes de semear
Base.metadata.create_all(bind=engine)

DEMO_CLIENTS = [
    ("Cliente Padrão", None),
    ("João Silva", date(1985, 7, 14)),
]

DEMO_PRODUCTS = [
    ("00011", "7891000100103", "Coca-Cola Lata 350ml", 5.50, 3.20),
    ("00012", "7891000200204", "Água Mineral 500ml", 3.00, 1.10),
    ("00013", "7891000300305", "Salgadinho 45g", 7.90, 4.00),
]

DEMO_SERVICE_TYPES = [
    ("Instalação", 150.0, 60),
    ("Manutenção preventiva", 90.0, 45),
]


def seed(db: Session) -> None:
    # Usuário administrador padrão (se não existir)
    if not crud.get_user_by_username(db, "admin"):
        crud.create_user(db, schemas.UserCreate(
            username="admin", password="admin",
            role=UserRole.ADMINISTRADOR, full_name="Administrador",
        ))

    for name, birth in DEMO_CLIENTS:
        if not db.query(Client).filter_by(name=name).first():
            db.add(Client(name=name, birth_date=birth))

    for sku, barcode, name, price, cost in DEMO_PRODUCTS:
        if not db.query(Product).filter_by(sku=sku).first():
            db.add(Product(sku=sku, barcode=barcode, name=name, price=price, cost=cost, stock=50))

    for name, price, minutes in DEMO_SERVICE_TYPES:
        if not db.query(ServiceType).filter_by(name=name).first():
            db.add(ServiceType(name=name, base_price=price, duration_minutes=minutes))

    db.commit()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    db = SessionLocal()
    try:
        seed(db)
        log.info("Seed OK (admin/admin, %d usuários, clientes, produtos e tipos de serviço).",
                 db.query(User).count())
    finally:
        db.close()


if __name__ == "__main__":
    main()
