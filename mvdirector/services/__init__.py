"""Services for MV Director."""

from mvdirector.services.credentials import CredentialProvider, EnvCredentialProvider
from mvdirector.services.image_generator import ImageGenerator
from mvdirector.services.text_generator import (
    ImageAttachment,
    StructuredRequest,
    TextGenerator,
    create_text_generator,
)

__all__ = [
    "CredentialProvider",
    "EnvCredentialProvider",
    "ImageAttachment",
    "ImageGenerator",
    "StructuredRequest",
    "TextGenerator",
    "create_text_generator",
]
