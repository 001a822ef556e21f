"""
Formatação para exibição (moeda, datas pt-BR) e coerção numérica de formulários.

A coerção imita o ``parseFloat``/``parseInt`` usado nos formulários: lê o
prefixo numérico do texto e devolve um padrão quando não há número.
"""
import math
import re
from datetime import date, datetime, time

from dateutil import parser as date_parser

MONTH_ABBR_PT = ("jan", "fev", "mar", "abr", "mai", "jun",
                 "jul", "ago", "set", "out", "nov", "dez")

_FLOAT_PREFIX_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d+")


# =========================
# Moeda
# =========================

def money(value) -> str:
    """
    Formata valor monetário no padrão brasileiro.

        1234.56 -> "R$ 1.234,56"
        -5      -> "-R$ 5,00"
    """
    try:
        v = float(value)
    except (TypeError, ValueError):
        return "R$ 0,00"
    if math.isnan(v) or math.isinf(v):
        return "R$ 0,00"
    sign = "-" if v < 0 else ""
    formatted = f"{abs(v):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R$ {formatted}"


def parse_money(text: str | None, default: float = 0.0) -> float:
    """Inverso de ``money``: "R$ 1.234,56" -> 1234.56."""
    if text is None:
        return default
    s = str(text).strip().replace("R$", "").replace("\xa0", "").strip()
    negative = s.startswith("-")
    s = s.lstrip("-").strip()
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    value = parse_float(s, default=None)
    if value is None:
        return default
    return -value if negative else value


# =========================
# Coerção de formulários
# =========================

def parse_float(value, default=0.0):
    """
    Prefixo numérico como ``parseFloat``; ``default`` só quando não há número.
    Zero é mantido, de modo que ``default=0`` equivale a ``parseFloat(v) || 0``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        v = float(value)
        return default if math.isnan(v) else v
    m = _FLOAT_PREFIX_RE.match(str(value))
    if not m:
        return default
    return float(m.group(0))


def parse_int(value, default=0):
    """``parseInt(value, 10) || default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, float):
        return default if math.isnan(value) else int(value)
    if isinstance(value, int):
        return value
    m = _INT_PREFIX_RE.match(str(value))
    if not m:
        return default
    return int(m.group(0))


def optional_float(value):
    """Campos opcionais (peso, dimensões): vazio vira ``None``."""
    if value in (None, ""):
        return None
    return parse_float(value, default=None)


# =========================
# Datas
# =========================

def to_datetime(value) -> datetime | None:
    """Aceita ``datetime``, ``date`` ou texto ISO; datas puras viram meia-noite."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    dt = date_parser.isoparse(str(value))
    return dt.replace(tzinfo=None) if dt.tzinfo else dt


def to_date(value) -> date | None:
    dt = to_datetime(value)
    return dt.date() if dt else None


def combine_date_time(day, hour) -> datetime | None:
    """Junta "YYYY-MM-DD" + "HH:MM" (como o formulário de agendamento); falta um -> None."""
    if not day or not hour:
        return None
    return to_datetime(f"{day}T{hour}")


def format_date(value) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY"""
    d = to_date(value)
    return d.strftime("%d/%m/%Y") if d else ""


def format_datetime(value) -> str:
    dt = to_datetime(value)
    return dt.strftime("%d/%m/%Y %H:%M") if dt else ""


def month_key(value) -> str:
    """Chave ``yyyy-MM`` usada nos agrupamentos mensais."""
    d = to_date(value)
    return d.strftime("%Y-%m") if d else ""


def month_label(key: str) -> str:
    """'2024-03' -> 'mar'"""
    return MONTH_ABBR_PT[int(key[5:7]) - 1]
