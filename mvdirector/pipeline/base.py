"""Common stage controller behaviour."""

import logging
from typing import Any, Callable, Optional

from mvdirector.agents.gateway import GenerationGateway
from mvdirector.config import Config, config as default_config
from mvdirector.errors import (
    GenerationError,
    MissingCredentialError,
    StageInputError,
    user_message,
)
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import ProjectState, WorkflowStep
from mvdirector.services.credentials import CredentialProvider

logger = logging.getLogger(__name__)


class StageController:
    """One pipeline stage: owns its slice of the project state.

    Subclasses implement ``current_artifacts``, ``inputs_ready``,
    ``can_advance`` and ``_generate``. Every call that would reach the
    generation backend goes through ``_run``, which refuses to start without a
    credential and turns ``GenerationError`` into ``last_error``.
    """

    step: WorkflowStep

    def __init__(
        self,
        state: ProjectState,
        gateway: GenerationGateway,
        credentials: CredentialProvider,
        config: Optional[Config] = None,
    ):
        self.state = state
        self.gateway = gateway
        self.credentials = credentials
        self.config = config or default_config
        self.is_loading = False
        self.last_error: Optional[str] = None
        self.last_error_kind: Optional[str] = None

    @property
    def locale(self) -> Locale:
        return self.state.locale

    @property
    def current_artifacts(self) -> list:
        raise NotImplementedError

    @property
    def has_output(self) -> bool:
        return bool(self.current_artifacts)

    def inputs_ready(self) -> bool:
        raise NotImplementedError

    @property
    def can_advance(self) -> bool:
        return self.has_output

    def enter(self) -> bool:
        """Generate automatically when the stage is empty and its inputs exist.

        Returns:
            True if a generation ran and succeeded
        """
        if self.has_output or not self.inputs_ready() or self.is_loading:
            return False
        logger.info(f"Auto-generating on first entry to {self.step.name}")
        return self.regenerate()

    def regenerate(self) -> bool:
        """Re-run the stage's full generation."""
        return self._run(self._generate)

    def _generate(self) -> None:
        raise NotImplementedError

    def clear_error(self) -> None:
        self.last_error = None
        self.last_error_kind = None

    def _run(
        self,
        action: Callable[..., Any],
        *args: Any,
        credentials: Optional[CredentialProvider] = None,
        **kwargs: Any,
    ) -> bool:
        """Run a generation action with credential gate and error capture."""
        self.clear_error()

        if not (credentials or self.credentials).has_credential():
            self._fail(MissingCredentialError("No API key selected"))
            return False
        if not self.inputs_ready():
            self._fail(StageInputError(f"{self.step.name} inputs are not ready"))
            return False

        self.is_loading = True
        try:
            action(*args, **kwargs)
        except GenerationError as e:
            self._fail(e)
            return False
        finally:
            self.is_loading = False
        return True

    def _fail(self, error: GenerationError) -> None:
        logger.warning(f"{self.step.name} generation failed ({error.kind}): {error}")
        for detail in error.details:
            logger.warning(f"  {detail}")
        self.last_error = user_message(error, self.locale.value)
        self.last_error_kind = error.kind

    def _check_index(self, index: int, items: list) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"{self.step.name}: index {index} out of range (0-{len(items) - 1})")
