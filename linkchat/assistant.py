"""Chat assistant: the single API that bot.py calls.

Wires together the URL detector, the scraper, and the LLM client.
"""

import logging
from typing import Dict, List, Optional

from linkchat.detector import first_url, strip_url
from linkchat.llm import LLMProtocol
from linkchat.prompts import user_prompt
from linkchat.scraper import Scraper

logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, something went wrong while answering that."


class ChatAssistant:
    """Answers chat messages, grounding them in linked page content."""

    def __init__(self, llm: LLMProtocol, scraper: Scraper):
        self.llm = llm
        self.scraper = scraper

    async def reply(
        self,
        message: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> str:
        """Answer a user message.

        Steps:
        1. Detect the first URL in the message
        2. Scrape it (cached) and take the extracted content
        3. Remove the URL from the message to get the question
        4. Append the content-grounded prompt to the history
        5. Return the LLM's reply

        A failed scrape leaves the content empty; the LLM still answers.
        """
        try:
            url = first_url(message)
            content = ""
            if url:
                logger.info("URL found in message: %s", url)
                scraped = await self.scraper.scrape(url)
                content = scraped.content

            question = strip_url(message, url)
            messages = list(history or [])
            messages.append({"role": "user", "content": user_prompt(question, content)})
            return await self.llm.complete(messages)
        except Exception:
            logger.exception("Failed to answer message")
            return ERROR_REPLY
