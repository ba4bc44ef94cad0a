"""
Entity and property types for the hexorder rules engine.

These are the contracts the rules engine reads from the entity/property
subsystem: entity types with a coarse role and typed property definitions,
plus the per-instance data attached to placed tiles and units.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union
from uuid import UUID, uuid4
from enum import Enum

from pydantic import BaseModel, Field, PrivateAttr

from ..errors import DuplicateIdentifierError, UnknownReferenceError


TypeId = UUID
"""Opaque, globally unique identifier for every definable thing."""


def new_type_id() -> TypeId:
    """Mint a fresh identifier. Identifiers are never reused."""
    return uuid4()


class VersionedModel(BaseModel):
    """A mutable registry handle with a change counter.

    Mutation helpers bump the version; code that edits the underlying
    lists directly must call ``mark_changed`` afterwards. Reactive
    components compare versions to decide whether to recompute.
    """
    _version: int = PrivateAttr(default=0)

    @property
    def version(self) -> int:
        return self._version

    def mark_changed(self) -> None:
        self._version += 1


class EntityRole(str, Enum):
    """Coarse role of an entity type on the board"""
    BOARD_POSITION = "board_position"
    TOKEN = "token"


class PropertyType(str, Enum):
    """Data type of a property definition"""
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    COLOR = "color"
    ENUM = "enum"


class Color(BaseModel):
    """Linear RGBA color, components in [0, 1]"""
    r: float = Field(ge=0, le=1)
    g: float = Field(ge=0, le=1)
    b: float = Field(ge=0, le=1)
    a: float = Field(1.0, ge=0, le=1)

    class Config:
        frozen = True


WHITE = Color(r=1.0, g=1.0, b=1.0)


class BoolValue(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool

    class Config:
        frozen = True


class IntValue(BaseModel):
    kind: Literal["int"] = "int"
    value: int

    class Config:
        frozen = True


class FloatValue(BaseModel):
    kind: Literal["float"] = "float"
    value: float

    class Config:
        frozen = True


class StringValue(BaseModel):
    kind: Literal["string"] = "string"
    value: str

    class Config:
        frozen = True


class ColorValue(BaseModel):
    kind: Literal["color"] = "color"
    value: Color

    class Config:
        frozen = True


class EnumValue(BaseModel):
    """The selected option name from the referenced EnumDefinition"""
    kind: Literal["enum"] = "enum"
    value: str

    class Config:
        frozen = True


PropertyValue = Annotated[
    Union[BoolValue, IntValue, FloatValue, StringValue, ColorValue, EnumValue],
    Field(discriminator="kind"),
]


def default_value_for(property_type: PropertyType) -> PropertyValue:
    """Return the default value for a property type."""
    if property_type == PropertyType.BOOL:
        return BoolValue(value=False)
    if property_type == PropertyType.INT:
        return IntValue(value=0)
    if property_type == PropertyType.FLOAT:
        return FloatValue(value=0.0)
    if property_type == PropertyType.STRING:
        return StringValue(value="")
    if property_type == PropertyType.COLOR:
        return ColorValue(value=WHITE)
    return EnumValue(value="")


def as_int(value: Optional[PropertyValue]) -> Optional[int]:
    """Coerce a numeric property value to int.

    Floats truncate toward zero. Non-numeric values (and ``None``) give
    ``None``.
    """
    if isinstance(value, IntValue):
        return value.value
    if isinstance(value, FloatValue):
        return int(value.value)
    return None


class PropertyDefinition(BaseModel):
    """A named, typed property with a default value"""
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    property_type: PropertyType
    default_value: PropertyValue
    # Only set for PropertyType.ENUM
    enum_id: Optional[TypeId] = None


class EnumDefinition(BaseModel):
    """A named set of string options for enum-typed properties"""
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    options: List[str] = Field(default_factory=list)


class EntityType(BaseModel):
    """A designer-defined kind of board object"""
    id: TypeId = Field(default_factory=new_type_id)
    name: str
    role: EntityRole
    color: Color = WHITE
    properties: List[PropertyDefinition] = Field(default_factory=list)

    def get_property(self, property_id: TypeId) -> Optional[PropertyDefinition]:
        return next((p for p in self.properties if p.id == property_id), None)

    def has_property(self, property_id: TypeId) -> bool:
        return self.get_property(property_id) is not None


class EntityData(BaseModel):
    """Concrete instance state attached to a placed tile or unit"""
    entity_type_id: TypeId
    properties: Dict[TypeId, PropertyValue] = Field(default_factory=dict)

    @classmethod
    def spawn(cls, entity_type: EntityType) -> "EntityData":
        """Create instance data populated with the type's default values."""
        return cls(
            entity_type_id=entity_type.id,
            properties={p.id: p.default_value for p in entity_type.properties},
        )

    def get(self, property_id: TypeId) -> Optional[PropertyValue]:
        return self.properties.get(property_id)


class EntityTypeRegistry(VersionedModel):
    """Registry of all entity types and enum definitions"""
    types: List[EntityType] = Field(default_factory=list)
    enum_definitions: List[EnumDefinition] = Field(default_factory=list)

    def get(self, entity_type_id: TypeId) -> Optional[EntityType]:
        return next((t for t in self.types if t.id == entity_type_id), None)

    def require(self, entity_type_id: TypeId) -> EntityType:
        entity_type = self.get(entity_type_id)
        if entity_type is None:
            raise UnknownReferenceError(
                "Entity type is not registered",
                kind="entity_type",
                reference_id=entity_type_id,
            )
        return entity_type

    def get_enum(self, enum_id: TypeId) -> Optional[EnumDefinition]:
        return next((e for e in self.enum_definitions if e.id == enum_id), None)

    def first(self) -> Optional[EntityType]:
        return self.types[0] if self.types else None

    def name_of(self, entity_type_id: TypeId, default: str) -> str:
        entity_type = self.get(entity_type_id)
        return entity_type.name if entity_type is not None else default

    def add_type(self, entity_type: EntityType) -> EntityType:
        if self.get(entity_type.id) is not None:
            raise DuplicateIdentifierError(
                f"Entity type {entity_type.name!r} is already registered",
                reference_id=entity_type.id,
            )
        self.types.append(entity_type)
        self.mark_changed()
        return entity_type

    def remove_type(self, entity_type_id: TypeId) -> EntityType:
        entity_type = self.require(entity_type_id)
        self.types.remove(entity_type)
        self.mark_changed()
        return entity_type

    def add_enum(self, enum_definition: EnumDefinition) -> EnumDefinition:
        if self.get_enum(enum_definition.id) is not None:
            raise DuplicateIdentifierError(
                f"Enum {enum_definition.name!r} is already registered",
                reference_id=enum_definition.id,
            )
        self.enum_definitions.append(enum_definition)
        self.mark_changed()
        return enum_definition
