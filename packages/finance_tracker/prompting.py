"""Prompt construction for the optional categorization oracle.

This module builds:
- The system instructions for the categorization task.
- The user content, embedding the deduplicated descriptions as a JSON array
  between ``BEGIN_DESCRIPTIONS_JSON`` / ``END_DESCRIPTIONS_JSON`` markers.
- The strict ``response_format`` (JSON Schema) object for the OpenAI
  Responses API, with the category enum taken from :class:`Category`.

Only cleaned descriptions are ever sent; dates and amounts stay local.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .models import Category

BEGIN_MARKER = "BEGIN_DESCRIPTIONS_JSON"
END_MARKER = "END_DESCRIPTIONS_JSON"

# User prompt template; placeholders are filled by build_user_content.
CATEGORIZE_TEMPLATE = (
    "Allowed categories: {{CATEGORY_LABELS}}.\n"
    "Return one result per description, echoing the description exactly as given.\n\n"
    f"{BEGIN_MARKER}\n{{{{DESCRIPTIONS_JSON}}}}\n{END_MARKER}"
)


def category_labels() -> list[str]:
    return [c.value for c in Category]


def build_system_instructions() -> str:
    return (
        "You are a personal finance assistant that categorizes Brazilian bank statement "
        "transactions. Choose exactly one category per description from the allowed list. "
        "Never invent categories. When unsure, use "
        f'"{Category.OTHER.value}". Output JSON only that conforms to the specified schema.'
    )


def build_user_content(descriptions: Sequence[str]) -> str:
    """Return the user message for ``descriptions`` (already deduplicated)."""

    labels = ", ".join(category_labels())
    payload = json.dumps(list(descriptions), ensure_ascii=False)
    return CATEGORIZE_TEMPLATE.replace("{{CATEGORY_LABELS}}", labels).replace(
        "{{DESCRIPTIONS_JSON}}", payload
    )


def build_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response_format object.

    Schema shape::

        {"results": [{"description": str, "category": <Category value>}]}
    """

    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "statement_categories",
        "schema": {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "description": {"type": "string"},
                            "category": {"type": "string", "enum": category_labels()},
                        },
                        "required": ["description", "category"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["results"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result


__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "category_labels",
    "build_system_instructions",
    "build_user_content",
    "build_response_format",
]
