"""
Side Quest Backend — Abstract Text Polishing Interface
========================================================

What:  Abstract base class for services that rewrite description text.
How:   Concrete implementations inherit from LLMService and implement polish().
Who:   Called by the POST /polish route through dependencies.get_text_polisher.

The route only depends on this contract, so tests inject an AsyncMock and a
different provider can replace GroqService without touching the route.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Abstract interface for AI-powered description polishing.

    Contract:
        - polish() sends exactly one prompt and returns the model's text,
          stripped of surrounding whitespace and otherwise unvalidated
        - no retries: a failed call surfaces immediately
        - a missing credential raises ConfigError
        - any other failure raises UpstreamError
    """

    @abstractmethod
    async def polish(self, text: str) -> str:
        """
        Rewrite `text` into a more professional description.

        Args:
            text: Non-empty description entered by the user.

        Returns:
            str: The polished description.

        Raises:
            ConfigError: No API credential is configured.
            UpstreamError: The remote call did not succeed.
        """
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when a credential is present (does not call the provider)."""
        ...
