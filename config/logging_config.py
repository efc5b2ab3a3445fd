"""Rich-handler logging for the gateway."""
import logging
from typing import Optional
from rich.logging import RichHandler
from .app_config import settings

# protocol stack internals are chatty at INFO
STACK_LOGGERS = ("bacpypes3",)

def configure(level: Optional[str] = None):
    level_name = (level or settings.LOG_LEVEL).upper()
    root_level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=root_level,
        format="%(name)-22s │ %(message)s",
        datefmt="%H:%M:%S",
        # object names may contain [brackets], so no rich markup
        handlers=[RichHandler(rich_tracebacks=True, markup=False, show_path=False)],
        force=True,
    )
    for name in STACK_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if root_level <= logging.DEBUG else logging.WARNING)
