"""Data model for the hexorder rules engine."""

from .core import (
    WHITE,
    BoolValue,
    Color,
    ColorValue,
    EntityData,
    EntityRole,
    EntityType,
    EntityTypeRegistry,
    EnumDefinition,
    EnumValue,
    FloatValue,
    IntValue,
    PropertyDefinition,
    PropertyType,
    PropertyValue,
    StringValue,
    TypeId,
    VersionedModel,
    as_int,
    default_value_for,
    new_type_id,
)
from .hex import (
    ORIGIN,
    BoardState,
    HexGridConfig,
    HexPosition,
    SelectedUnit,
    Tile,
    UnitInstance,
)
from .ontology import (
    AllOf,
    Allow,
    AnyOf,
    Block,
    CompareOp,
    Concept,
    ConceptBinding,
    ConceptRegistry,
    ConceptRole,
    Constraint,
    ConstraintExpr,
    ConstraintRegistry,
    CrossCompare,
    IsNotType,
    IsType,
    ModifyOperation,
    ModifyProperty,
    Not,
    PathBudget,
    PropertyBinding,
    PropertyCompare,
    Relation,
    RelationEffect,
    RelationRegistry,
    RelationTrigger,
)
from .validation import (
    SchemaError,
    SchemaErrorCategory,
    SchemaValidation,
    ValidationResult,
    ValidMoveSet,
)

__all__ = [
    "AllOf",
    "Allow",
    "AnyOf",
    "Block",
    "BoardState",
    "BoolValue",
    "Color",
    "ColorValue",
    "CompareOp",
    "Concept",
    "ConceptBinding",
    "ConceptRegistry",
    "ConceptRole",
    "Constraint",
    "ConstraintExpr",
    "ConstraintRegistry",
    "CrossCompare",
    "EntityData",
    "EntityRole",
    "EntityType",
    "EntityTypeRegistry",
    "EnumDefinition",
    "EnumValue",
    "FloatValue",
    "HexGridConfig",
    "HexPosition",
    "IntValue",
    "IsNotType",
    "IsType",
    "ModifyOperation",
    "ModifyProperty",
    "Not",
    "ORIGIN",
    "PathBudget",
    "PropertyBinding",
    "PropertyCompare",
    "PropertyDefinition",
    "PropertyType",
    "PropertyValue",
    "Relation",
    "RelationEffect",
    "RelationRegistry",
    "RelationTrigger",
    "SchemaError",
    "SchemaErrorCategory",
    "SchemaValidation",
    "SelectedUnit",
    "StringValue",
    "Tile",
    "TypeId",
    "UnitInstance",
    "ValidMoveSet",
    "ValidationResult",
    "VersionedModel",
    "WHITE",
    "as_int",
    "default_value_for",
    "new_type_id",
]
