from __future__ import annotations

from typing import List, Optional

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import SQLModel, Field as SQLField

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 255
WEATHER_MAX_LENGTH = 500


# ----------------------------
# Tables
# ----------------------------

class IncidentRow(SQLModel, table=True):
    __tablename__ = "incident_table"

    name: str = SQLField(primary_key=True, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = SQLField(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    weather: Optional[str] = SQLField(default=None, max_length=WEATHER_MAX_LENGTH)


class ImageRow(SQLModel, table=True):
    __tablename__ = "image_table"
    __table_args__ = {"sqlite_autoincrement": True}

    picture_reference: Optional[int] = SQLField(default=None, primary_key=True)
    name: str = SQLField(index=True, max_length=NAME_MAX_LENGTH)  # owning incident, no FK
    picture: bytes


# ----------------------------
# Caller-facing value
# ----------------------------

class Incident(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str = ""
    weather: str = ""
    images: List[Image.Image] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: IncidentRow, images: List[Image.Image]) -> "Incident":
        return cls(
            name=row.name,
            description=row.description or "",
            weather=row.weather or "",
            images=images,
        )

    def to_row(self) -> IncidentRow:
        return IncidentRow(name=self.name, description=self.description, weather=self.weather)
