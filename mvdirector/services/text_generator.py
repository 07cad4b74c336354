"""Structured (JSON) text generation backends.

The gateway hands a ``StructuredRequest`` to one of these and gets raw JSON
text back. Gemini enforces the schema server-side via ``response_schema``;
Claude receives the schema in the instruction.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from mvdirector.config import Config, config as default_config
from mvdirector.errors import CapabilityError, MissingCredentialError
from mvdirector.services.credentials import CredentialProvider, EnvCredentialProvider

logger = logging.getLogger(__name__)


@dataclass
class ImageAttachment:
    """Binary image sent along with a request (e.g. a character reference)."""

    data: bytes
    mime_type: str = "image/png"


@dataclass
class StructuredRequest:
    """A schema-constrained generation request."""

    instruction: str
    schema: dict
    system_instruction: Optional[str] = None
    attachments: list[ImageAttachment] = field(default_factory=list)


class TextGenerator:
    """Base class for structured text backends."""

    def __init__(
        self,
        config: Optional[Config] = None,
        credentials: Optional[CredentialProvider] = None,
    ):
        self.config = config or default_config
        self.credentials = credentials or EnvCredentialProvider(self.config)
        self._client = None
        self._client_key: Optional[str] = None

    def _require_key(self) -> str:
        api_key = self.credentials.get_credential()
        if not api_key:
            raise MissingCredentialError("No API key configured")
        return api_key

    def generate_json(self, request: StructuredRequest) -> str:
        """Run the request and return the raw response text."""
        raise NotImplementedError

    def _log_request(self, model: str, request: StructuredRequest) -> None:
        logger.info("=" * 60)
        logger.info(f"STRUCTURED PROMPT (model={model}):")
        logger.info("-" * 60)
        for line in request.instruction.strip().split("\n"):
            logger.info(line)
        logger.info(f"Attachments: {len(request.attachments)}")
        logger.info("=" * 60)


class GeminiTextGenerator(TextGenerator):
    """Structured output through google-genai with a response schema."""

    def _get_client(self):
        """Lazy load Gemini client (rebuilt when the selected key changes)."""
        api_key = self._require_key()
        if self._client is None or self._client_key != api_key:
            from google import genai

            self._client = genai.Client(api_key=api_key)
            self._client_key = api_key
        return self._client

    def generate_json(self, request: StructuredRequest) -> str:
        from google.genai import types

        client = self._get_client()
        model_name = self.config.gemini_text_model
        self._log_request(model_name, request)

        # Images first, then the instruction
        parts = [
            types.Part.from_bytes(data=attachment.data, mime_type=attachment.mime_type)
            for attachment in request.attachments
        ]
        parts.append(types.Part.from_text(text=request.instruction))

        try:
            response = client.models.generate_content(
                model=model_name,
                contents=[types.Content(role="user", parts=parts)],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=request.schema,
                    system_instruction=request.system_instruction,
                ),
            )
        except Exception as e:
            logger.error(f"Gemini structured generation failed: {e}")
            raise CapabilityError(str(e)) from e

        return response.text or ""


class ClaudeTextGenerator(TextGenerator):
    """Structured output through the Anthropic Messages API.

    The schema is rendered into the prompt; JSON is extracted from the reply
    by the gateway.
    """

    def _get_client(self):
        """Lazy load Anthropic client (rebuilt when the selected key changes)."""
        api_key = self._require_key()
        if self._client is None or self._client_key != api_key:
            import anthropic

            self._client = anthropic.Anthropic(api_key=api_key)
            self._client_key = api_key
        return self._client

    def generate_json(self, request: StructuredRequest) -> str:
        client = self._get_client()
        model_name = self.config.claude_model
        self._log_request(model_name, request)

        content = []
        for attachment in request.attachments:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": attachment.mime_type,
                    "data": base64.b64encode(attachment.data).decode("ascii"),
                },
            })
        content.append({
            "type": "text",
            "text": (
                f"{request.instruction.strip()}\n\n"
                "Return ONLY valid JSON matching this schema "
                "(OpenAPI types, 'required' fields must be present). "
                "No markdown formatting, no explanation text.\n"
                f"{json.dumps(request.schema, indent=2, ensure_ascii=False)}"
            ),
        })

        system = request.system_instruction or "You are a JSON generation assistant."

        try:
            response = client.messages.create(
                model=model_name,
                max_tokens=self.config.claude_max_tokens,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
        except Exception as e:
            logger.error(f"Claude structured generation failed: {e}")
            raise CapabilityError(str(e)) from e

        logger.info(f"Response from model: {response.model}")
        if not response.content:
            return ""
        return response.content[0].text


def create_text_generator(
    config: Optional[Config] = None,
    credentials: Optional[CredentialProvider] = None,
) -> TextGenerator:
    """Build the backend selected by ``config.text_backend``."""
    config = config or default_config
    if config.text_backend == "claude":
        return ClaudeTextGenerator(config, credentials)
    return GeminiTextGenerator(config, credentials)
