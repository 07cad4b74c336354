"""Shared plumbing for the structured generation agents."""

import json
import logging
import re
from typing import Any, Optional

from mvdirector.config import Config, config as default_config
from mvdirector.errors import EmptyResponseError, MalformedResponseError
from mvdirector.models.localization import Locale
from mvdirector.services.text_generator import (
    ImageAttachment,
    StructuredRequest,
    TextGenerator,
    create_text_generator,
)

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_keys(item: dict) -> dict:
    """``visualDescription_ko`` -> ``visual_description_ko``."""
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in item.items()}


def localized_properties(fields: dict[str, dict]) -> dict[str, dict]:
    """Expand ``{"title": {...}}`` into ``title_ko`` / ``title_en`` schema properties."""
    properties = {}
    for name, field_schema in fields.items():
        for locale in Locale:
            properties[f"{name}_{locale.value}"] = dict(field_schema)
    return properties


def localized_required(fields) -> list[str]:
    return [f"{name}_{locale.value}" for name in fields for locale in Locale]


def array_of(properties: dict, required: list[str]) -> dict:
    return {
        "type": "ARRAY",
        "items": {"type": "OBJECT", "properties": properties, "required": required},
    }


def object_of(properties: dict, required: list[str]) -> dict:
    return {"type": "OBJECT", "properties": properties, "required": required}


def load_payload(text: Optional[str]) -> Any:
    """Parse JSON from a response, tolerating fenced or embedded JSON."""
    if not text or not text.strip():
        raise EmptyResponseError("Response contained no text")

    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try to find JSON in markdown code block
    json_match = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError:
            pass

    # Try to find a JSON array or object in text
    for pattern in (r"\[[\s\S]*\]", r"\{[\s\S]*\}"):
        json_match = re.search(pattern, text)
        if json_match:
            try:
                return json.loads(json_match.group(0))
            except json.JSONDecodeError:
                pass

    raise MalformedResponseError("Response is not valid JSON")


def check_shape(payload: Any, schema: dict) -> Any:
    """Verify the payload against the declared top-level shape and required keys."""
    if schema["type"] == "ARRAY":
        if isinstance(payload, dict):
            # Some models wrap the array in a single-key object
            lists = [value for value in payload.values() if isinstance(value, list)]
            if len(payload) == 1 and len(lists) == 1:
                payload = lists[0]
        if not isinstance(payload, list):
            raise MalformedResponseError(f"Expected a JSON array, got {type(payload).__name__}")
        if not payload:
            raise EmptyResponseError("Response array was empty")
        item_schema = schema["items"]
        problems = []
        for index, item in enumerate(payload):
            problems.extend(_missing_fields(item, item_schema, f"item {index + 1}"))
        if problems:
            raise MalformedResponseError("Response items are missing required fields", problems)
        return payload

    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(payload).__name__}")
    problems = _missing_fields(payload, schema, "response")
    if problems:
        raise MalformedResponseError("Response is missing required fields", problems)
    return payload


def _missing_fields(item: Any, schema: dict, label: str) -> list[str]:
    if not isinstance(item, dict):
        return [f"{label}: not an object"]
    return [
        f"{label}: missing {name}"
        for name in schema.get("required", [])
        if item.get(name) is None
    ]


class StructuredAgent:
    """Base for agents that turn stage context into schema-checked JSON."""

    SYSTEM_PROMPT = "You are a creative Music Video Director. Output JSON only."

    def __init__(
        self,
        config: Optional[Config] = None,
        text_generator: Optional[TextGenerator] = None,
    ):
        self.config = config or default_config
        self._text_generator = text_generator

    @property
    def text_generator(self) -> TextGenerator:
        """Lazy load the configured text backend."""
        if self._text_generator is None:
            self._text_generator = create_text_generator(self.config)
        return self._text_generator

    def _request(
        self,
        instruction: str,
        schema: dict,
        attachments: Optional[list[ImageAttachment]] = None,
        system_instruction: Optional[str] = None,
    ) -> Any:
        request = StructuredRequest(
            instruction=instruction,
            schema=schema,
            system_instruction=system_instruction or self.SYSTEM_PROMPT,
            attachments=attachments or [],
        )
        text = self.text_generator.generate_json(request)
        payload = check_shape(load_payload(text), schema)
        if isinstance(payload, list):
            logger.info(f"{type(self).__name__} received {len(payload)} items")
        return payload
