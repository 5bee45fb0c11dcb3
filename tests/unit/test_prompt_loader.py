"""Tests for prompt template loading and prompt assembly."""

from pathlib import Path

import pytest

from docintake.llm.exceptions import LlmError
from docintake.llm.prompt_builder import build_correction_prompt, build_system_prompt, describe_schema
from docintake.llm.prompt_loader import (
    CORRECTION_PROMPT,
    SYSTEM_PROMPT,
    VISION_INSTRUCTION,
    load_prompt_template,
)
from docintake.schemas.job_offer import JOB_OFFER_SCHEMA
from docintake.schemas.models import FieldError
from docintake.schemas.resume import RESUME_SCHEMA


class TestLoadPromptTemplate:
    def test_loads_system_template(self) -> None:
        template = load_prompt_template(SYSTEM_PROMPT)
        assert "{intro}" in template
        assert "{schema_description}" in template

    def test_loads_correction_template(self) -> None:
        template = load_prompt_template(CORRECTION_PROMPT)
        assert "{errors}" in template
        assert "CORRECTION REQUISE" in template

    def test_loads_vision_instruction(self) -> None:
        assert "JSON" in load_prompt_template(VISION_INSTRUCTION)

    def test_loads_custom_template(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.txt"
        custom.write_text("Hello {intro}")
        assert load_prompt_template("ignored.txt", custom) == "Hello {intro}"

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(LlmError, match="Failed to load prompt"):
            load_prompt_template("x.txt", Path("/nonexistent/file.txt"))


class TestPromptBuilder:
    def test_describe_schema_lists_every_field(self) -> None:
        description = describe_schema(RESUME_SCHEMA)
        for descriptor in RESUME_SCHEMA.fields:
            assert f'"{descriptor.name}"' in description

    def test_describe_schema_lists_enum_values(self) -> None:
        description = describe_schema(RESUME_SCHEMA)
        assert '"bac+5"' in description
        assert '"alternance"' in description

    def test_describe_schema_shows_defaults(self) -> None:
        assert '"Offre de stage"' in describe_schema(JOB_OFFER_SCHEMA)

    def test_system_prompt_includes_intro_and_schema(self) -> None:
        prompt = build_system_prompt(RESUME_SCHEMA, load_prompt_template(SYSTEM_PROMPT))
        assert prompt.startswith(RESUME_SCHEMA.description)
        assert '"linkedinUrl"' in prompt
        assert "{" in prompt

    def test_correction_prompt_lists_errors_and_forbids_null(self) -> None:
        system = build_system_prompt(RESUME_SCHEMA, load_prompt_template(SYSTEM_PROMPT))
        prompt = build_correction_prompt(
            system,
            (FieldError("firstName", "Expected string, received number"),),
            RESUME_SCHEMA,
            load_prompt_template(CORRECTION_PROMPT),
        )
        assert prompt.startswith(system)
        assert "firstName: Expected string, received number" in prompt
        assert "N'utilise JAMAIS null" in prompt

    def test_correction_prompt_reminds_defaults(self) -> None:
        system = build_system_prompt(JOB_OFFER_SCHEMA, load_prompt_template(SYSTEM_PROMPT))
        prompt = build_correction_prompt(
            system,
            (FieldError("title", "Expected string, received number"),),
            JOB_OFFER_SCHEMA,
            load_prompt_template(CORRECTION_PROMPT),
        )
        assert 'title vaut "Offre de stage" par défaut' in prompt
        assert 'contractType vaut "stage" par défaut' in prompt
