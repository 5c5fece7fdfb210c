import logging

from academy.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
    # uvicorn's access log duplicates what the routers already report
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
