"""
Refine Service.

Rewrites note text with an LLM through a PydanticAI agent: grammar, tense
and sentence structure are corrected while meaning and tone are kept.
Failures are raised to the caller; no fallback text is produced.

Usage:
    from ainotes.services.factory import build_refine_service

    service = build_refine_service()
    refined = await service.refine("i has went to the store")
    content = apply_refinement(original, refined, RefineMode.APPEND)
"""

from enum import Enum
from typing import Any

from pydantic_ai import Agent

from ainotes.core.concurrency import get_semaphore
from ainotes.core.exceptions import RefinementFailedError, ServiceUnavailableError
from ainotes.core.logging import log_with_source
from ainotes.services.base import BaseService

REFINED_SEPARATOR = "\n\n---\nRefined:\n"


class RefineMode(str, Enum):
    """How a refinement is applied to the original text."""

    REPLACE = "replace"
    APPEND = "append"


def apply_refinement(original: str, refined: str, mode: RefineMode) -> str:
    """Combine original and refined text according to `mode`."""
    if mode is RefineMode.REPLACE:
        return refined
    return f"{original}{REFINED_SEPARATOR}{refined}"


class RefineService(BaseService):
    """
    Service for AI text refinement.

    The model is injected: a PydanticAI model instance or model name, or
    None when no API key is configured, in which case every call raises
    ServiceUnavailableError.
    """

    def __init__(
        self,
        model: Any,
        instructions: str,
        temperature: float = 0.3,
    ) -> None:
        super().__init__()
        self._model = model
        self.instructions = instructions
        self.temperature = temperature
        self._agent: Agent[None, str] | None = None

    @property
    def available(self) -> bool:
        return self._model is not None

    def _get_agent(self) -> Agent[None, str]:
        """Create the agent on first use."""
        if self._model is None:
            log_with_source(self._logger, "ai", "error", "AI API key is missing")
            raise ServiceUnavailableError()
        if self._agent is None:
            self._agent = Agent(
                self._model,
                output_type=str,
                instructions=self.instructions,
            )
        return self._agent

    async def refine(self, text: str) -> str:
        """
        Refine a piece of text.

        Args:
            text: Non-blank text to rewrite

        Returns:
            The refined text, or `text` itself if the model answered with nothing

        Raises:
            ValidationError: If text is blank
            ServiceUnavailableError: If no model is configured
            RefinementFailedError: If the model call fails
        """
        self._validate_required({"text": text}, ["text"])
        agent = self._get_agent()

        self._log_operation("Refining text", length=len(text))
        try:
            async with get_semaphore("llm"):
                result = await agent.run(
                    text,
                    model_settings={"temperature": self.temperature},
                )
        except Exception as e:
            log_with_source(self._logger, "ai", "error", "Refinement failed", error=str(e))
            raise RefinementFailedError() from e

        refined = (result.output or "").strip()
        return refined or text
