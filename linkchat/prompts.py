"""System prompt and user prompt template for chat completions.

The user prompt embeds scraped page content so the model answers from
the page rather than from memory.
"""

SYSTEM_PROMPT = (
    "You are an academic expert with knowledge of computer science topics "
    "with over 20 years of experience. You always cite your sources and base "
    "your responses only on the context that you have been provided."
)


def user_prompt(question: str, content: str) -> str:
    """Build the user turn sent to the LLM.

    Args:
        question: The user's message with any URL removed.
        content: Extracted page text, or an empty string when nothing
                 was scraped.

    Returns:
        The complete user prompt string.
    """
    return f"""\
Answer my question: "{question}"

Based on the following content:
<content>
{content}
</content>"""
