import logging
from typing import Dict, List, Optional, Protocol

import anthropic

from linkchat.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

API_ERROR_REPLY = "Sorry, I couldn't process that right now. (API error)"
UNEXPECTED_ERROR_REPLY = "Sorry, something went wrong. (Unexpected error)"


class LLMProtocol(Protocol):
    """Interface for completion clients."""

    async def complete(
        self,
        messages: List[Dict[str, str]],
        system: Optional[str] = None,
    ) -> str:
        """Send role-tagged messages and return the reply text.

        Catches errors and returns user-friendly error strings.
        """
        ...


class ClaudeLLMClient:
    """Claude API client via the Anthropic SDK."""

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024):
        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    async def complete(
        self,
        messages: List[Dict[str, str]],
        system: Optional[str] = None,
    ) -> str:
        """Send the conversation to Claude and return the response text."""
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system or SYSTEM_PROMPT,
                messages=messages,
            )
            return response.content[0].text
        except anthropic.APIError as e:
            logger.error("Claude API error: %s", e)
            return API_ERROR_REPLY
        except Exception:
            logger.exception("Unexpected error calling Claude")
            return UNEXPECTED_ERROR_REPLY
