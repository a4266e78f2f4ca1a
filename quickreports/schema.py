from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from quickreports.errors import StorageError
from quickreports.models import ImageRow, IncidentRow

logger = logging.getLogger(__name__)

TABLES = [IncidentRow.__table__, ImageRow.__table__]


def ensure_schema(engine: Engine) -> None:
    """
    Idempotent:
    - Creates incident_table, image_table and the owner index only if absent.
    - Never drops or truncates existing rows.
    """
    try:
        SQLModel.metadata.create_all(engine, tables=TABLES, checkfirst=True)
    except SQLAlchemyError as e:
        logger.warning("Could not create incident schema: %s", e)
        raise StorageError(f"schema creation failed: {e}") from e


def drop_schema(engine: Engine) -> None:
    # Debug helper: wipes both tables and everything in them.
    try:
        SQLModel.metadata.drop_all(engine, tables=TABLES, checkfirst=True)
    except SQLAlchemyError as e:
        logger.warning("Could not drop incident schema: %s", e)
        raise StorageError(f"schema drop failed: {e}") from e
    logger.info("Dropped incident and image tables")
