import os

import pytest

# Banco em memória antes de importar a aplicação
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402

from gestao.app import app  # noqa: E402
from gestao.database import Base, engine  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    """Tabelas vazias a cada teste."""
    Base.metadata.create_all(bind=engine)
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client():
    return TestClient(app)


def _login(client, username, password):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    r = client.post("/api/auth/register", json={"username": "admin", "password": "admin", "full_name": "Admin"})
    assert r.status_code == 200, r.text
    return _login(client, "admin", "admin")


@pytest.fixture
def user_headers(client, admin_headers):
    """Cria um usuário com o papel pedido e devolve os headers já autenticados."""
    def _make(role, username=None):
        username = username or f"u_{role}"
        r = client.post(
            "/api/users",
            json={"username": username, "password": "x1", "role": role},
            headers=admin_headers,
        )
        assert r.status_code == 200, r.text
        return _login(client, username, "x1")
    return _make
