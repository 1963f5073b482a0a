# acs_bridge/database/__init__.py
# Módulo de persistência - metadados do operador (SQLite/PostgreSQL/MySQL)

from .connection import get_db, init_db, engine, SessionLocal
from .models import Base, MapItem, OnuConfig

__all__ = [
    "get_db",
    "init_db",
    "engine",
    "SessionLocal",
    "Base",
    "MapItem",
    "OnuConfig",
]
