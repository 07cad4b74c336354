"""API key availability for the generation backends."""

import logging
from typing import Optional

from mvdirector.config import Config, config as default_config

logger = logging.getLogger(__name__)


class CredentialProvider:
    """Answers whether a usable credential is selected, and lets the UI pick one."""

    def has_credential(self) -> bool:
        return bool(self.get_credential())

    def get_credential(self) -> str:
        raise NotImplementedError

    def select_credential(self, api_key: str) -> None:
        raise NotImplementedError


class EnvCredentialProvider(CredentialProvider):
    """Credential backed by the config (env / .env), overridable at runtime.

    Args:
        config: Configuration to read the key from
        backend: "gemini" or "claude"; defaults to the configured text backend
    """

    def __init__(self, config: Optional[Config] = None, backend: Optional[str] = None):
        self.config = config or default_config
        self.backend = backend

    @property
    def _backend(self) -> str:
        return self.backend or self.config.text_backend

    def get_credential(self) -> str:
        if self._backend == "claude":
            return self.config.anthropic_api_key
        return self.config.google_api_key

    def select_credential(self, api_key: str) -> None:
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("API key must not be empty")
        if self._backend == "claude":
            self.config.anthropic_api_key = api_key
        else:
            self.config.google_api_key = api_key
        logger.info(f"Selected API key for {self._backend} backend")


class StaticCredentialProvider(CredentialProvider):
    """Fixed in-memory credential, e.g. for the CLI or tests."""

    def __init__(self, api_key: str = ""):
        self._api_key = api_key

    def get_credential(self) -> str:
        return self._api_key

    def select_credential(self, api_key: str) -> None:
        self._api_key = api_key.strip()
