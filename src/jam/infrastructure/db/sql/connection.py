import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


DATABASE_URL_ENV = "JAM_DATABASE_URL"


def database_url() -> Optional[str]:
    value = str(os.getenv(DATABASE_URL_ENV, "") or "").strip()
    return value or None


def create_session_factory(url: str, *, echo: bool = False) -> sessionmaker:
    engine = create_engine(url, echo=echo, future=True, pool_pre_ping=True)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
