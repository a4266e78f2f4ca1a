from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import create_engine

from quickreports.schema import ensure_schema

load_dotenv(dotenv_path=".env")

logger = logging.getLogger(__name__)

DATABASE_NAME = "Incidents"
DB_PATH = Path(os.getenv("QUICKREPORTS_DB_PATH", f"{DATABASE_NAME}.db"))
DB_ECHO = os.getenv("QUICKREPORTS_DB_ECHO", "").strip().lower() in ("1", "true", "yes")


def open_engine(path: Optional[Union[str, Path]] = None, echo: Optional[bool] = None) -> Engine:
    db_path = Path(path) if path is not None else DB_PATH
    logger.debug("Opening incident database at %s", db_path)
    return create_engine(f"sqlite:///{db_path}", echo=DB_ECHO if echo is None else echo)


@contextmanager
def database(path: Optional[Union[str, Path]] = None, echo: Optional[bool] = None) -> Iterator[Engine]:
    """
    Application-lifetime handle:
    - Opens the engine once and makes sure both tables exist.
    - Disposes the connection pool on exit, including error exits.
    """
    engine = open_engine(path, echo=echo)
    try:
        ensure_schema(engine)
        yield engine
    finally:
        engine.dispose()
