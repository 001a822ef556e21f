"""
Menu lateral e controle de acesso por papel.

A tabela ``PAGES`` é a única fonte de quais papéis enxergam cada seção; a
API consulta a mesma tabela (``can_access``) antes de atender a requisição.
"""
from collections import namedtuple
from dataclasses import dataclass, field
from typing import List, Optional

from .enums import Theme, UserRole

NavItem = namedtuple("NavItem", "page title url icon roles")

_STAFF = (UserRole.ADMINISTRADOR, UserRole.ADMINISTRATIVO, UserRole.GERENTE, UserRole.VENDEDOR)
_SALES = (UserRole.ADMINISTRADOR, UserRole.GERENTE, UserRole.VENDEDOR)
_MANAGERS = (UserRole.ADMINISTRADOR, UserRole.GERENTE)


def page_url(page_name: str) -> str:
    return "/" + page_name


def _item(page, title, icon, roles) -> NavItem:
    return NavItem(page, title, page_url(page), icon, frozenset(r.value for r in roles))


PAGES = (
    _item("Dashboard", "Dashboard", "layout-dashboard", _STAFF),
    _item("PDV", "PDV", "shopping-cart", _SALES),
    _item("Orcamentos", "Orçamentos", "file-text", _SALES),
    _item("OrdemServico", "Ordens de Serviço", "clipboard-list", _STAFF),
    _item("Servicos", "Serviços", "wrench", _STAFF),
    _item("Financeiro", "Financeiro", "dollar-sign",
          (UserRole.ADMINISTRADOR, UserRole.ADMINISTRATIVO, UserRole.GERENTE)),
    _item("Produtos", "Produtos", "package", _STAFF),
    _item("Clientes", "Clientes", "users", _STAFF),
    _item("Relatorios", "Relatórios", "bar-chart", _MANAGERS),
    _item("Calendario", "Calendário", "calendar", _STAFF),
    _item("Funcionarios", "Funcionários", "user-cog", _MANAGERS),
    _item("Configuracoes", "Configurações", "settings", (UserRole.ADMINISTRADOR,)),
)

PAGES_BY_NAME = {p.page: p for p in PAGES}

# seção que autoriza a escrita em cada entidade
ENTITY_PAGE = {
    "clients": "Clientes",
    "products": "Produtos",
    "sales": "PDV",
    "transactions": "Financeiro",
    "quotes": "Orcamentos",
    "service_types": "Servicos",
    "services": "Servicos",
    "service_orders": "OrdemServico",
}

# leitura das listagens: qualquer papel que veja o Dashboard
READ_PAGE = "Dashboard"


def can_access(role, page_name: str) -> bool:
    page = PAGES_BY_NAME.get(page_name)
    if page is None:
        return False
    return getattr(role, "value", role) in page.roles


def nav_items(role) -> List[NavItem]:
    return [p for p in PAGES if getattr(role, "value", role) in p.roles]


@dataclass
class SessionContext:
    """
    Dados da sessão do usuário logado: preenchido em ``start`` (login),
    esvaziado em ``clear`` (logout).
    """
    user: Optional[dict] = None
    role: Optional[str] = None
    theme: str = Theme.CLARO.value
    nav: List[NavItem] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return self.user is not None

    def start(self, user: dict) -> "SessionContext":
        self.user = user
        self.role = user.get("role")
        self.theme = user.get("theme") or Theme.CLARO.value
        self.nav = nav_items(self.role)
        return self

    def clear(self) -> None:
        self.user = None
        self.role = None
        self.theme = Theme.CLARO.value
        self.nav = []

    def to_dict(self) -> dict:
        return {
            "user": self.user,
            "role": self.role,
            "theme": self.theme,
            "nav": [
                {"page": n.page, "title": n.title, "url": n.url, "icon": n.icon}
                for n in self.nav
            ],
        }
