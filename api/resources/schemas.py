"""
Pydantic schemas for the collection resources.

Field order is column order. A field's alias is its JSON name on the wire;
fields without an alias use the column name. Defaults are the "zero" value so
a missing field decodes and is then caught by the batch validator, which
checks the required columns against `required_annotation`.
"""

from __future__ import annotations

from datetime import datetime
from types import NoneType
from typing import Annotated, Any, get_args

from pydantic import BaseModel, ConfigDict, Field

# What "set" means for a required column on writes.
RequiredInt = Annotated[int, Field(gt=0)]
RequiredStr = Annotated[str, Field(min_length=1)]


def required_annotation(annotation: Any) -> Any:
    """
    The constrained, non-nullable form of a record field's type.
    """
    base = next((arg for arg in get_args(annotation) if arg is not NoneType), annotation)
    if base is int:
        return RequiredInt
    if base is str:
        return RequiredStr
    return base


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IdentifierSet(BaseModel):
    ids: list[int] = Field(default_factory=list)


class BWH(Record):
    entry_id: int = 0
    bust: int = 0
    waist: int = 0
    hip: int = 0
    height: int | None = None
    weight: int | None = None


class Entry(Record):
    id: int = 0
    source_id: int = 0
    name: str = ""
    image: str = ""
    content: str = ""
    created_at: datetime | None = None


class EntryTag(Record):
    id: int = 0
    entry_id: int = 0
    tag_id: int = 0


class EyeColor(Record):
    entry_id: int = Field(default=0, alias="EntryID")
    color_id: int = Field(default=0, alias="ColorID")


class EyeColorType(Record):
    id: int = Field(default=0, alias="ID")
    color: str = Field(default="", alias="Color")


class HairColor(Record):
    entry_id: int = Field(default=0, alias="EntryID")
    color_id: int = Field(default=0, alias="ColorID")


class HairColorType(Record):
    id: int = Field(default=0, alias="ID")
    color: str = Field(default="", alias="Color")


class HairLength(Record):
    entry_id: int = Field(default=0, alias="EntryID")
    hairlength_type_id: int = Field(default=0, alias="HairLengthTypeID")


class HairLengthType(Record):
    id: int = Field(default=0, alias="ID")
    length: str = Field(default="", alias="Length")


class HairStyle(Record):
    entry_id: int = Field(default=0, alias="EntryID")
    style_id: int = Field(default=0, alias="StyleID")


class HairStyleType(Record):
    id: int = Field(default=0, alias="ID")
    style: str = Field(default="", alias="Style")


class HekiRadarChart(Record):
    entry_id: int = Field(default=0, alias="EntryID")
    ai: int = Field(default=0, alias="AI")
    nu: int = Field(default=0, alias="NU")


class Link(Record):
    id: int = Field(default=0, alias="ID")
    entry_id: int = Field(default=0, alias="EntryID")
    type: str = Field(default="", alias="Type")
    url: str = Field(default="", alias="URL")
    nsfw: bool = Field(default=False, alias="Nsfw")
    darkness: bool = Field(default=False, alias="Darkness")


class Personality(Record):
    entry_id: int = Field(default=0, alias="EntryID")
    type_id: int = Field(default=0, alias="TypeID")


class PersonalityType(Record):
    id: int = Field(default=0, alias="ID")
    type: str = Field(default="", alias="Type")
