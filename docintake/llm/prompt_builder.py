import json

from docintake.schemas.models import FieldDescriptor, FieldError, FieldType, TargetSchema
from docintake.schemas.validator import format_errors


def describe_schema(schema: TargetSchema) -> str:
    """Render the schema field by field, enumerated value sets included."""
    lines = [f'  "{f.name}": {_describe_field(f)}' for f in schema.fields]
    return "{\n" + ",\n".join(lines) + "\n}"


def build_system_prompt(schema: TargetSchema, template: str) -> str:
    return template.format(
        intro=schema.description,
        schema_description=describe_schema(schema),
    ).strip()


def build_correction_prompt(
    system_prompt: str,
    errors: tuple[FieldError, ...],
    schema: TargetSchema,
    template: str,
) -> str:
    reminders = "".join(
        f"- {name} vaut {json.dumps(default, ensure_ascii=False)} par défaut si absent\n"
        for name, default in schema.defaults.items()
    )
    return template.format(
        system_prompt=system_prompt,
        errors=format_errors(errors),
        defaults_reminder=reminders,
    ).strip()


def _describe_field(descriptor: FieldDescriptor) -> str:
    if descriptor.type is FieldType.STRING:
        shape = f'"string - {descriptor.description}"' if descriptor.description else '"string"'
    elif descriptor.type is FieldType.STRING_ARRAY:
        shape = f'["string", ...] - {descriptor.description}'.rstrip(" -")
    elif descriptor.type is FieldType.ENUM:
        shape = " | ".join(f'"{v}"' for v in descriptor.enum_values)
        if descriptor.description:
            shape += f" - {descriptor.description}"
    else:
        shape = "[" + ", ".join(f'"{v}"' for v in descriptor.enum_values) + "]"
        if descriptor.description:
            shape += f" - {descriptor.description}"

    if descriptor.default is not None:
        shape += f" (défaut: {json.dumps(descriptor.default, ensure_ascii=False)})"
    elif descriptor.required:
        shape += " (OBLIGATOIRE)"
    else:
        shape += " (omis si absent)"
    return shape
