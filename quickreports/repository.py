from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from PIL import Image
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from quickreports.errors import ConflictError, NotFoundError, StorageError, ValidationError
from quickreports.image_codec import decode_image, encode_image
from quickreports.models import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    WEATHER_MAX_LENGTH,
    ImageRow,
    Incident,
    IncidentRow,
)

logger = logging.getLogger(__name__)


def validate_incident(incident: Incident) -> None:
    if not incident.name or not incident.name.strip():
        raise ValidationError("incident name must not be empty")
    for field, limit in (
        ("name", NAME_MAX_LENGTH),
        ("description", DESCRIPTION_MAX_LENGTH),
        ("weather", WEATHER_MAX_LENGTH),
    ):
        value = getattr(incident, field)
        if len(value) > limit:
            raise ValidationError(f"incident {field} is {len(value)} characters, limit is {limit}")


class IncidentRepository:
    """
    CRUD over incident_table + image_table.

    Every write runs in one session/transaction: the incident row and the
    image rows owned by its name are committed together or not at all.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ----------------------------
    # Writes
    # ----------------------------

    def create(self, incident: Incident) -> None:
        validate_incident(incident)
        with self._storage_errors(incident.name, conflicts=True), Session(self.engine) as session:
            if session.get(IncidentRow, incident.name) is not None:
                raise ConflictError(incident.name)
            session.add(incident.to_row())
            session.flush()
            count = self._insert_images(session, incident.name, incident.images)
            session.commit()
        logger.info("Created incident %s with %d image(s)", incident.name, count)

    def update(self, incident: Incident, original_name: str) -> None:
        validate_incident(incident)
        with self._storage_errors(incident.name, conflicts=True), Session(self.engine) as session:
            row = self._get_row_or_raise(session, original_name)
            if incident.name != original_name and session.get(IncidentRow, incident.name) is not None:
                raise ConflictError(incident.name)

            # primary key change is flushed as UPDATE ... WHERE name = original_name
            row.name = incident.name
            row.description = incident.description
            row.weather = incident.weather
            session.add(row)

            self._delete_images(session, original_name)
            count = self._insert_images(session, incident.name, incident.images)
            session.commit()

        if incident.name != original_name:
            logger.info("Renamed incident %s -> %s with %d image(s)", original_name, incident.name, count)
        else:
            logger.info("Updated incident %s with %d image(s)", incident.name, count)

    def remove(self, name: str) -> None:
        with self._storage_errors(name), Session(self.engine) as session:
            row = session.get(IncidentRow, name)
            if row is not None:
                session.delete(row)
            removed = self._delete_images(session, name)
            session.commit()
        if row is not None:
            logger.info("Removed incident %s and %d image(s)", name, removed)

    def remove_all(self) -> None:
        with self._storage_errors(), Session(self.engine) as session:
            for row in session.exec(select(IncidentRow)).all():
                session.delete(row)
            for image_row in session.exec(select(ImageRow)).all():
                session.delete(image_row)
            session.commit()
        logger.info("Removed all incidents and images")

    # ----------------------------
    # Reads
    # ----------------------------

    def get(self, name: str) -> Incident:
        with self._storage_errors(name), Session(self.engine) as session:
            row = self._get_row_or_raise(session, name)
            images = self._load_images(session, name)
            incident = Incident.from_row(row, images)
        logger.debug("Loaded incident %s with %d image(s)", name, len(images))
        return incident

    def get_all(self) -> List[Incident]:
        incidents: List[Incident] = []
        with self._storage_errors(), Session(self.engine) as session:
            rows = session.exec(select(IncidentRow)).all()
            # one image query per incident; fine at single-user scale
            for row in rows:
                incidents.append(Incident.from_row(row, self._load_images(session, row.name)))
        logger.debug("Loaded %d incident(s)", len(incidents))
        return incidents

    def count_incidents(self) -> int:
        with self._storage_errors(), Session(self.engine) as session:
            return session.exec(select(func.count()).select_from(IncidentRow)).one()

    def count_images(self, name: Optional[str] = None) -> int:
        statement = select(func.count()).select_from(ImageRow)
        if name is not None:
            statement = statement.where(ImageRow.name == name)
        with self._storage_errors(name), Session(self.engine) as session:
            return session.exec(statement).one()

    # ----------------------------
    # Helpers
    # ----------------------------

    @staticmethod
    def _get_row_or_raise(session: Session, name: str) -> IncidentRow:
        row = session.get(IncidentRow, name)
        if row is None:
            raise NotFoundError(name)
        return row

    @staticmethod
    def _insert_images(session: Session, name: str, images: List[Image.Image]) -> int:
        for image in images:
            session.add(ImageRow(name=name, picture=encode_image(image)))
        session.flush()
        return len(images)

    @staticmethod
    def _delete_images(session: Session, name: str) -> int:
        image_rows = session.exec(select(ImageRow).where(ImageRow.name == name)).all()
        for image_row in image_rows:
            session.delete(image_row)
        session.flush()
        return len(image_rows)

    @staticmethod
    def _load_images(session: Session, name: str) -> List[Image.Image]:
        # no ORDER BY: rows come back in whatever order SQLite yields
        blobs = session.exec(select(ImageRow.picture).where(ImageRow.name == name)).all()
        return [decode_image(blob) for blob in blobs]

    @contextmanager
    def _storage_errors(self, name: Optional[str] = None, conflicts: bool = False) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            logger.warning("Integrity error on incident %s: %s", name, e)
            # only create/update can collide on the name primary key
            if conflicts and name:
                raise ConflictError(name) from e
            raise StorageError(f"database constraint failed: {e}") from e
        except SQLAlchemyError as e:
            logger.warning("Storage error on incident %s: %s", name, e)
            raise StorageError(f"database operation failed: {e}") from e
