import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gestao.db")

connect_args = {}
engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    # SQLite + threadpool do FastAPI
    connect_args = {"check_same_thread": False}
    if ":memory:" in DATABASE_URL:
        # uma única conexão compartilhada, senão cada sessão vê um banco vazio
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, connect_args=connect_args, **engine_kwargs)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db():
    """
    Dependência do FastAPI: uma sessão por requisição, fechada ao final.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
