import logging
import sys

from conquest.config import LOG_LEVEL


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure the root logger for the game process.
    - One stream handler on stdout.
    - Our own packages log at the requested level, chatty libraries are kept at WARNING.
    """
    level = level or LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("conquest").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("shapely").setLevel(logging.WARNING)
