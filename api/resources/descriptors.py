"""
Static description of every collection resource.

A descriptor is all the engine needs to serve a table: where it lives, which
column requests filter on, what the JSON envelope is called, which columns
must be set on writes and which ones the database assigns.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from pydantic import BaseModel, ConfigDict, Field, create_model

from core.errors import QueryConfigurationError

from . import schemas


@dataclass(frozen=True)
class Column:
    name: str
    json_name: str


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    table: str
    key: str
    envelope: str
    model: type[schemas.Record]
    required: tuple[str, ...] = ()
    generated: tuple[str, ...] = ()
    order_by: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        names = set(self.column_names)
        unknown = [c for c in (self.key, *self.required, *self.generated, *self.order_by) if c not in names]
        if unknown:
            raise ValueError(f"Resource {self.name!r} refers to unknown columns: {unknown}")
        if not self.update_columns:
            raise QueryConfigurationError(f"Resource {self.name!r} has no updatable columns.")

    @cached_property
    def columns(self) -> tuple[Column, ...]:
        return tuple(
            Column(name=name, json_name=info.alias or name)
            for name, info in self.model.model_fields.items()
        )

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(self.model.model_fields)

    @property
    def insert_columns(self) -> tuple[str, ...]:
        return tuple(c for c in self.column_names if c not in self.generated)

    @property
    def update_columns(self) -> tuple[str, ...]:
        return tuple(c for c in self.insert_columns if c != self.key)

    @property
    def ordering(self) -> tuple[str, ...]:
        return self.order_by or (self.key,)

    @cached_property
    def envelope_model(self) -> type[BaseModel]:
        return create_model(
            f"{self.model.__name__}Envelope",
            **{self.envelope: (list[self.model], Field(default_factory=list))},
        )

    @cached_property
    def write_model(self) -> type[BaseModel]:
        """
        Strict model over the required columns; a record passes it when each
        of them is set.
        """
        fields = {
            column: (schemas.required_annotation(self.model.model_fields[column].annotation), ...)
            for column in self.required
        }
        return create_model(
            f"{self.model.__name__}Write",
            __config__=ConfigDict(strict=True),
            **fields,
        )

    def json_name(self, column: str) -> str:
        for c in self.columns:
            if c.name == column:
                return c.json_name
        raise KeyError(column)


RESOURCES: tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        name="bwh",
        table="bwh",
        key="entry_id",
        envelope="bwhs",
        model=schemas.BWH,
        required=("entry_id", "bust", "waist", "hip"),
    ),
    ResourceDescriptor(
        name="entry",
        table="entry",
        key="id",
        envelope="entries",
        model=schemas.Entry,
        required=("source_id", "name", "created_at"),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="entry_tag",
        table="entry_tag",
        key="id",
        envelope="entry_tags",
        model=schemas.EntryTag,
        required=("entry_id", "tag_id"),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="eyescolor",
        table="eyecolor",
        key="entry_id",
        envelope="eyecolors",
        model=schemas.EyeColor,
        required=("entry_id", "color_id"),
        order_by=("entry_id", "color_id"),
    ),
    ResourceDescriptor(
        name="eyescolor_type",
        table="eyecolor_type",
        key="id",
        envelope="eyecolor_types",
        model=schemas.EyeColorType,
        required=("color",),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="haircolor",
        table="haircolor",
        key="entry_id",
        envelope="haircolors",
        model=schemas.HairColor,
        required=("entry_id", "color_id"),
        order_by=("entry_id", "color_id"),
    ),
    ResourceDescriptor(
        name="haircolor_type",
        table="haircolor_type",
        key="id",
        envelope="haircolor_types",
        model=schemas.HairColorType,
        required=("color",),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="hairlength",
        table="hairlength",
        key="entry_id",
        envelope="hairlengths",
        model=schemas.HairLength,
        required=("entry_id", "hairlength_type_id"),
        order_by=("entry_id", "hairlength_type_id"),
    ),
    ResourceDescriptor(
        name="hairlength_type",
        table="hairlength_type",
        key="id",
        envelope="hairlength_types",
        model=schemas.HairLengthType,
        required=("length",),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="hairstyle",
        table="hairstyle",
        key="entry_id",
        envelope="hair_styles",
        model=schemas.HairStyle,
        required=("entry_id", "style_id"),
        order_by=("entry_id", "style_id"),
    ),
    ResourceDescriptor(
        name="hairstyle_type",
        table="hairstyle_type",
        key="id",
        envelope="hairstyle_types",
        model=schemas.HairStyleType,
        required=("style",),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="heki_radar_chart",
        table="heki_radar_chart",
        key="entry_id",
        envelope="heki_radar_charts",
        model=schemas.HekiRadarChart,
        required=("entry_id", "ai", "nu"),
    ),
    ResourceDescriptor(
        name="link",
        table="link",
        key="id",
        envelope="links",
        model=schemas.Link,
        required=("entry_id", "type", "url"),
        generated=("id",),
    ),
    ResourceDescriptor(
        name="personality",
        table="personality",
        key="entry_id",
        envelope="personalities",
        model=schemas.Personality,
        required=("entry_id", "type_id"),
        order_by=("entry_id", "type_id"),
    ),
    ResourceDescriptor(
        name="personality_type",
        table="personality_type",
        key="id",
        envelope="personality_types",
        model=schemas.PersonalityType,
        required=("type",),
        generated=("id",),
    ),
)

BY_NAME: dict[str, ResourceDescriptor] = {r.name: r for r in RESOURCES}


def get(name: str) -> ResourceDescriptor:
    return BY_NAME[name]
