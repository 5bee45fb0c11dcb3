"""Generic interpreter validating model output against a TargetSchema."""

from typing import Any

from docintake.processor.exceptions import SchemaValidationError
from docintake.schemas.models import (
    FieldDescriptor,
    FieldError,
    FieldType,
    TargetSchema,
    ValidationOutcome,
)


def strip_nulls(value: Any) -> Any:
    """Recursively drop ``None`` object values and ``None`` array elements.

    Idempotent: normalizing an already-normalized value returns an equal value.
    """
    if isinstance(value, dict):
        return {k: strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_nulls(v) for v in value if v is not None]
    return value


def restrict_to_schema(data: dict[str, Any], schema: TargetSchema) -> dict[str, Any]:
    """Keep only declared fields, without any type checking."""
    names = schema.field_names
    return {k: v for k, v in data.items() if k in names and v is not None}


def validate(data: Any, schema: TargetSchema) -> ValidationOutcome:
    """Check *data* against *schema*.

    Absent fields with a default get the default; other absent fields are
    omitted. Undeclared keys are dropped from the result.
    """
    if not isinstance(data, dict):
        return ValidationOutcome(
            valid=False,
            errors=(FieldError("", f"Expected object, received {_type_name(data)}"),),
        )

    result: dict[str, Any] = {}
    errors: list[FieldError] = []
    for descriptor in schema.fields:
        if descriptor.name not in data or data[descriptor.name] is None:
            if descriptor.default is not None:
                result[descriptor.name] = descriptor.default
            elif descriptor.required:
                errors.append(FieldError(descriptor.name, "Required"))
            continue
        value, field_errors = _check_field(descriptor, data[descriptor.name])
        if field_errors:
            errors.extend(field_errors)
        else:
            result[descriptor.name] = value

    if errors:
        return ValidationOutcome(valid=False, errors=tuple(errors))
    return ValidationOutcome(valid=True, data=result)


def validate_strict(data: Any, schema: TargetSchema) -> dict[str, Any]:
    """Validate and return the record, or raise.

    Raises:
        SchemaValidationError: with the ordered list of field errors.
    """
    outcome = validate(data, schema)
    if not outcome.valid or outcome.data is None:
        raise SchemaValidationError(
            f"{schema.name} validation failed: {format_errors(outcome.errors)}",
            errors=outcome.errors,
        )
    return outcome.data


def format_errors(errors: tuple[FieldError, ...] | list[FieldError]) -> str:
    return ", ".join(str(e) for e in errors)


def _check_field(descriptor: FieldDescriptor, value: Any) -> tuple[Any, list[FieldError]]:
    name = descriptor.name
    if descriptor.type is FieldType.STRING:
        if not isinstance(value, str):
            return None, [_type_error(name, "string", value)]
        return value, []

    if descriptor.type is FieldType.ENUM:
        if not isinstance(value, str) or value not in descriptor.enum_values:
            return None, [_enum_error(name, descriptor.enum_values, value)]
        return value, []

    if not isinstance(value, list):
        return None, [_type_error(name, "array", value)]

    errors: list[FieldError] = []
    for i, item in enumerate(value):
        path = f"{name}.{i}"
        if descriptor.type is FieldType.STRING_ARRAY and not isinstance(item, str):
            errors.append(_type_error(path, "string", item))
        elif descriptor.type is FieldType.ENUM_ARRAY and (
            not isinstance(item, str) or item not in descriptor.enum_values
        ):
            errors.append(_enum_error(path, descriptor.enum_values, item))
    return list(value), errors


def _type_error(path: str, expected: str, value: Any) -> FieldError:
    return FieldError(path, f"Expected {expected}, received {_type_name(value)}")


def _enum_error(path: str, allowed: tuple[str, ...], value: Any) -> FieldError:
    options = " | ".join(f"'{v}'" for v in allowed)
    return FieldError(path, f"Invalid enum value. Expected {options}, received {value!r}")


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
