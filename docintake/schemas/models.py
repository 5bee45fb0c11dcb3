from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    STRING = "string"
    STRING_ARRAY = "string_array"
    ENUM = "enum"
    ENUM_ARRAY = "enum_array"


@dataclass(frozen=True)
class FieldDescriptor:
    """Declarative description of one expected output field."""

    name: str
    type: FieldType
    description: str = ""
    required: bool = False
    default: Any = None
    enum_values: tuple[str, ...] = ()


@dataclass(frozen=True)
class TargetSchema:
    """Static contract a structured-extraction call must conform to."""

    name: str
    entity_type: str
    description: str
    fields: tuple[FieldDescriptor, ...]

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(f.name for f in self.fields)

    @property
    def defaults(self) -> dict[str, Any]:
        return {f.name: f.default for f in self.fields if f.default is not None}


@dataclass(frozen=True)
class FieldError:
    field_path: str
    message: str

    def __str__(self) -> str:
        return f"{self.field_path}: {self.message}" if self.field_path else self.message


@dataclass(frozen=True)
class ValidationOutcome:
    valid: bool
    data: dict[str, Any] | None = None
    errors: tuple[FieldError, ...] = field(default_factory=tuple)
