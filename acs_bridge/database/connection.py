# acs_bridge/database/connection.py
# Sessões do banco do operador (map_items / onu_config)

import logging
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from acs_bridge.settings import settings

log = logging.getLogger("acs-bridge.database")

DATABASE_URL = settings.DATABASE_URL


def build_engine(url: str) -> Engine:
    """SQLite local (dev/testes) usa uma conexão compartilhada entre threads."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_size=5, max_overflow=10, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """Dependency FastAPI: uma sessão por request, sempre fechada no final."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _ensure_sqlite_dir(url: str) -> None:
    if not url.startswith("sqlite:///"):
        return
    db_file = url[len("sqlite:///"):]
    if db_file and db_file != ":memory:":
        Path(db_file).parent.mkdir(parents=True, exist_ok=True)


def init_db(bind: Engine = None) -> None:
    """
    Cria map_items/onu_config se ainda não existirem.
    Em produção as tabelas pertencem ao sistema do operador e já existem.
    """
    from .models import Base

    bind = bind or engine
    _ensure_sqlite_dir(str(bind.url))
    Base.metadata.create_all(bind=bind)
    log.info(f"[Database] pronto: {bind.url!r}")
