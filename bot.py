import logging
from typing import List, Optional

from telegram import Update
from telegram.ext import (
    ApplicationBuilder,
    BaseHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

import config
from linkchat.assistant import ChatAssistant
from linkchat.cache import ContentCache, SQLiteKeyValueStore
from linkchat.extractor import HtmlExtractor
from linkchat.llm import ClaudeLLMClient
from linkchat.scraper import Scraper

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

# Module-level assistant, initialized in main()
assistant = None  # type: Optional[ChatAssistant]

# context.chat_data key for the running conversation
_HISTORY_KEY = "history"

PURGE_INTERVAL_SECONDS = 24 * 60 * 60


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the /start command."""
    await update.message.reply_text(
        "Hello! Send me a question, optionally with a link, and I'll answer "
        "it based on the page's content.\n\n"
        "Type /help to see what I can do."
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the /help command."""
    await update.message.reply_text(
        "Send a message with a URL to ask about that page.\n\n"
        "/clear \u2014 Forget the conversation so far\n"
        "/help \u2014 Show this message"
    )


async def clear_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the /clear command — drop the chat history."""
    context.chat_data.pop(_HISTORY_KEY, None)
    await update.message.reply_text("Conversation cleared.")


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Answer an incoming message, keeping a bounded chat history."""
    user = update.effective_user
    text = update.message.text

    history = context.chat_data.get(_HISTORY_KEY, [])
    response = await assistant.reply(text, history)

    # Only the raw message is remembered, not the page content
    history = history + [
        {"role": "user", "content": text},
        {"role": "assistant", "content": response},
    ]
    # Trim in user/assistant pairs so history always starts with a user turn
    keep = config.MAX_HISTORY_MESSAGES // 2 * 2
    context.chat_data[_HISTORY_KEY] = history[-keep:] if keep else []

    logger.info("Answered message from user %s (id=%d)", user.username, user.id)
    await update.message.reply_text(response)


def purge_cache(store: SQLiteKeyValueStore) -> int:
    """Delete expired cache rows and log how many were removed."""
    removed = store.purge_expired()
    logger.info("Purged %d expired cache entries", removed)
    return removed


async def purge_cache_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Scheduled job: purge the store passed as the job's data."""
    purge_cache(context.job.data)


def build_handlers(authorized_user_id: int) -> List[BaseHandler]:
    """Build the command and message handlers for the authorized user.

    Only new messages are handled; edits carry no update.message.
    """
    auth = filters.User(user_id=authorized_user_id) & filters.UpdateType.MESSAGE
    return [
        CommandHandler("start", start_command, filters=auth),
        CommandHandler("help", help_command, filters=auth),
        CommandHandler("clear", clear_command, filters=auth),
        MessageHandler(filters.TEXT & ~filters.COMMAND & auth, handle_message),
    ]


def main() -> None:
    """Validate config, initialize the assistant, build application, and start polling."""
    global assistant
    config.validate_config()

    store = SQLiteKeyValueStore(db_path=config.CACHE_DB_PATH)
    cache = ContentCache(store)
    scraper = Scraper(
        cache=cache,
        extractor=HtmlExtractor(cache=cache, timeout=config.FETCH_TIMEOUT),
    )
    llm = ClaudeLLMClient(
        api_key=config.ANTHROPIC_API_KEY,
        model=config.LLM_MODEL,
        max_tokens=config.LLM_MAX_TOKENS,
    )
    assistant = ChatAssistant(llm=llm, scraper=scraper)

    purge_cache(store)

    app = ApplicationBuilder().token(config.BOT_TOKEN).build()

    for handler in build_handlers(config.AUTHORIZED_USER_ID):
        app.add_handler(handler)

    if app.job_queue is not None:
        app.job_queue.run_repeating(
            purge_cache_job,
            interval=PURGE_INTERVAL_SECONDS,
            first=PURGE_INTERVAL_SECONDS,
            data=store,
        )
    else:
        logger.warning("Job queue unavailable; expired cache rows are purged only at startup")

    logger.info(
        "Bot starting with LLM model %s, cache at %s. Listening for user ID %d.",
        config.LLM_MODEL,
        config.CACHE_DB_PATH,
        config.AUTHORIZED_USER_ID,
    )
    app.run_polling()


if __name__ == "__main__":
    main()
