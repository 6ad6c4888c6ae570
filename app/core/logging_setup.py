import logging
import sys
from typing import Optional


def setup_logging(log_file: Optional[str] = None):
    """Configures logging to write to the console and, if given, a file."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
    # Ensure specific loggers are also propagating or handled
    logging.getLogger("uvicorn").handlers = []  # Avoid double logging if uvicorn sets its own
    logging.getLogger("uvicorn").propagate = True


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields) -> None:
    """Schreibt eine strukturierte Diagnosezeile: ``event key=value ...``.

    Felder mit ``None`` werden ausgelassen. Nur für Betreiber gedacht, nie
    für den Endnutzer.
    """
    parts = [event]
    for key, value in fields.items():
        if value is None:
            continue
        parts.append(f"{key}={value}")
    logger.log(level, " ".join(parts))
