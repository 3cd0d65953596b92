from pathlib import Path
import logging
import os
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from jam.bootstrap import create_career_service
from jam.presentation.main_menu import main_menu


logger = logging.getLogger("jam")


def _configure_logging() -> None:
    level_name = str(os.getenv("JAM_LOG_LEVEL", "WARNING") or "WARNING").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- Menus: use UP/DOWN (or W/S), ENTER to select, ESC/Q to go back.")
    print("- Saves live in JAM_SAVE_DIR (default ~/.performer_jam).")
    print("- Startup issues: verify JAM_DATABASE_URL or unset it to save to files.")


def _is_database_connectivity_error(exc: Exception) -> bool:
    text = str(exc).lower()
    markers = (
        "can't connect to mysql server",
        "2003 (hy000)",
        "(10061)",
        "connection refused",
        "could not connect to server",
        "unable to open database file",
        "could not prepare the save table",
    )
    return any(marker in text for marker in markers)


def main():
    load_dotenv()
    _configure_logging()
    try:
        career_service = create_career_service()
        main_menu(career_service)
    except KeyboardInterrupt:
        print("\nSession ended.")
    except Exception as exc:
        if os.getenv("JAM_DATABASE_URL") and _is_database_connectivity_error(exc):
            print("Database connection unavailable; retrying with file saves.")
            os.environ.pop("JAM_DATABASE_URL", None)
            try:
                career_service = create_career_service()
                main_menu(career_service)
                return
            except KeyboardInterrupt:
                print("\nSession ended.")
                return
            except Exception as fallback_exc:
                exc = fallback_exc
        logger.exception("Unexpected error in the career shell")
        print("An unexpected error occurred. The game closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
