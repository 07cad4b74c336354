"""Generation error taxonomy.

Every failure of the generation boundary is a ``GenerationError``. Stage
controllers catch these, turn them into a message in the active locale and
keep the rest of the project untouched.
"""

from typing import Optional


class GenerationError(Exception):
    """Base class for failures surfaced by the generation gateway."""

    kind = "generation"

    def __init__(self, message: str = "", details: Optional[list[str]] = None):
        super().__init__(message or self.kind)
        self.details = details or []


class MissingCredentialError(GenerationError):
    """No usable API key is selected; nothing may be sent."""

    kind = "missing_credential"


class EmptyResponseError(GenerationError):
    """The capability answered without a parseable payload."""

    kind = "empty_response"


class MalformedResponseError(GenerationError):
    """The payload does not satisfy the declared output shape.

    Also raised when a detailed storyboard shot exceeds the duration bound.
    """

    kind = "malformed_response"


class UnmatchedArtifactError(GenerationError):
    """A response item references an artifact that does not exist.

    Non-fatal: the item is dropped and matching continues.
    """

    kind = "unmatched_artifact"

    def __init__(self, key: object, message: str = ""):
        super().__init__(message or f"No artifact matches key {key!r}")
        self.key = key


class CapabilityError(GenerationError):
    """The underlying SDK call failed (network, quota, safety block...)."""

    kind = "capability"


class StageInputError(GenerationError):
    """A stage was asked to generate before its inputs exist."""

    kind = "missing_inputs"


class EmptyPromptError(GenerationError):
    """A shot has neither an image prompt nor a visual action to render."""

    kind = "empty_prompt"


# User-facing messages per error kind and locale
ERROR_MESSAGES = {
    "missing_credential": {
        "ko": "API 키가 선택되지 않았습니다. 먼저 API 키를 설정해주세요.",
        "en": "No API key is selected. Please configure an API key first.",
    },
    "empty_response": {
        "ko": "AI가 빈 응답을 반환했습니다. 다시 시도해주세요.",
        "en": "The AI returned an empty response. Please try again.",
    },
    "malformed_response": {
        "ko": "AI 응답 형식이 올바르지 않습니다. 다시 시도해주세요.",
        "en": "The AI response was not in the expected format. Please try again.",
    },
    "unmatched_artifact": {
        "ko": "일부 응답 항목이 기존 장면과 일치하지 않아 무시되었습니다.",
        "en": "Some response items did not match an existing scene and were ignored.",
    },
    "capability": {
        "ko": "AI 서비스 호출 중 오류가 발생했습니다. 다시 시도해주세요.",
        "en": "The AI service call failed. Please try again.",
    },
    "missing_inputs": {
        "ko": "이전 단계의 결과가 필요합니다. 이전 단계를 먼저 완료해주세요.",
        "en": "This step needs the previous step's results. Please complete it first.",
    },
    "empty_prompt": {
        "ko": "이 컷에는 프롬프트가 없습니다. 프롬프트를 입력한 후 다시 시도해주세요.",
        "en": "This cut has no prompt. Enter a prompt and try again.",
    },
    "generation": {
        "ko": "생성 중 오류가 발생했습니다. 다시 시도해주세요.",
        "en": "An error occurred during generation. Please try again.",
    },
}


def user_message(error: GenerationError, locale: str) -> str:
    """Message for ``error`` in ``locale`` (falls back to English)."""
    messages = ERROR_MESSAGES.get(error.kind, ERROR_MESSAGES["generation"])
    message = messages.get(locale) or messages["en"]
    if error.details:
        message += " (" + "; ".join(error.details[:3]) + ")"
    return message
