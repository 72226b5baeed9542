import logging
import sys


def setup_logging(level: int | str | None = None) -> None:
    """Configure root logger for the service."""
    if level is None:
        from smsjobs.config import get_settings

        level = get_settings().log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        root.handlers.clear()
    root.addHandler(handler)
    # Reduce noise from third-party libs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def mask_phone(phone: str) -> str:
    """Keep only the last four digits of a phone number for log lines."""
    if not phone:
        return "<none>"
    return f"***{phone[-4:]}"
