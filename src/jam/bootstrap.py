import logging
import os
import random
import socket
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.exc import SQLAlchemyError

from jam.application.services.career_journal import register_career_journal
from jam.application.services.career_service import DEFAULT_PERFORM_DELAY_S, CareerService
from jam.application.services.event_bus import EventBus
from jam.application.services.release_scorer import SCORING_MODE_DICE, SCORING_MODES
from jam.application.services.save_migrator import SAVE_KEY
from jam.application.services.scheduler import BlockingScheduler, Scheduler
from jam.domain.models.career import DEFAULT_PERFORMER_NAME
from jam.domain.repositories import SaveRepository, SaveStoreError
from jam.infrastructure.file_save_repo import DEFAULT_SAVE_DIR, FileSaveRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    save_dir: str = DEFAULT_SAVE_DIR
    save_key: str = SAVE_KEY
    scoring_mode: str = SCORING_MODE_DICE
    seed: Optional[int] = None
    perform_delay_s: float = DEFAULT_PERFORM_DELAY_S
    performer_name: str = DEFAULT_PERFORMER_NAME


def _env_str(name: str, default: str) -> str:
    value = str(os.getenv(name, "") or "").strip()
    return value or default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default
    if value != value or value < 0:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default
    return value


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return None


def load_settings() -> Settings:
    scoring_mode = _env_str("JAM_SCORING_MODE", SCORING_MODE_DICE).lower()
    if scoring_mode not in SCORING_MODES:
        logger.warning("Unknown JAM_SCORING_MODE=%r, using %s", scoring_mode, SCORING_MODE_DICE)
        scoring_mode = SCORING_MODE_DICE
    database_url = str(os.getenv("JAM_DATABASE_URL", "") or "").strip() or None
    return Settings(
        database_url=database_url,
        save_dir=_env_str("JAM_SAVE_DIR", DEFAULT_SAVE_DIR),
        save_key=_env_str("JAM_SAVE_KEY", SAVE_KEY),
        scoring_mode=scoring_mode,
        seed=_env_int("JAM_SEED"),
        perform_delay_s=_env_float("JAM_PERFORM_DELAY_S", DEFAULT_PERFORM_DELAY_S),
        performer_name=_env_str("JAM_PERFORMER_NAME", DEFAULT_PERFORMER_NAME),
    )


def _looks_like_local_mysql_unreachable(database_url: str) -> bool:
    if not database_url:
        return False

    parsed = urlparse(database_url)
    if not parsed.scheme.startswith("mysql"):
        return False

    host = (parsed.hostname or "").strip().lower()
    if host not in {"localhost", "127.0.0.1", "::1"}:
        return False

    port = parsed.port or 3306
    timeout = _env_float("JAM_DB_CONNECT_PROBE_TIMEOUT_S", 0.35)

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return False
    except OSError:
        return True


def _build_sql_save_repo(database_url: str) -> SaveRepository:
    from jam.infrastructure.db.sql.connection import create_session_factory
    from jam.infrastructure.db.sql.save_repo import SqlSaveRepository

    return SqlSaveRepository(create_session_factory(database_url))


def create_save_repo(settings: Settings) -> SaveRepository:
    if settings.database_url:
        if _looks_like_local_mysql_unreachable(settings.database_url):
            print("Database appears unreachable, saving to files instead.")
            return FileSaveRepository(settings.save_dir)
        try:
            return _build_sql_save_repo(settings.database_url)
        except (SaveStoreError, SQLAlchemyError, ImportError) as exc:
            logger.warning("SQL save store unavailable: %s", exc)
            print(f"Database unavailable, saving to files instead. Reason: {exc}")
    return FileSaveRepository(settings.save_dir)


def create_career_service(
    settings: Optional[Settings] = None,
    *,
    save_repo: Optional[SaveRepository] = None,
    scheduler: Optional[Scheduler] = None,
    rng: Optional[random.Random] = None,
) -> CareerService:
    active = settings or load_settings()
    event_bus = EventBus()
    service = CareerService(
        save_repo if save_repo is not None else create_save_repo(active),
        rng=rng if rng is not None else random.Random(active.seed),
        event_bus=event_bus,
        scheduler=scheduler if scheduler is not None else BlockingScheduler(),
        save_key=active.save_key,
        scoring_mode=active.scoring_mode,
        perform_delay_s=active.perform_delay_s,
        performer_name=active.performer_name,
    )
    service.journal = register_career_journal(event_bus)
    return service
