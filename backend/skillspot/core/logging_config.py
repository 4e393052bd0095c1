import logging

from .config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process."""
    name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx logs every request at INFO; the Supabase client is chatty
    logging.getLogger("httpx").setLevel(logging.WARNING)
