"""
integrations/telegram_notifier.py
---------------------------------
Sends notifications to a single Telegram chat through the Bot API.
"""

from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

from config import TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID
from utils.errors import ExternalServiceError
from utils.logger import get_logger

logger = get_logger(__name__)


class TelegramNotifier:
    """Posts a message to the configured chat. Disabled without token and chat id."""

    def __init__(self, token: Optional[str] = None, chat_id: Optional[str] = None):
        self.token = token if token is not None else TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id if chat_id is not None else TELEGRAM_CHAT_ID

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    async def send(self, title: str, message: str = "") -> None:
        """
        Raises:
            ExternalServiceError: If the Bot API rejects the message.
        """
        if not self.enabled:
            return
        text = f"🔔 *{title}*\n\n{message}" if message else f"🔔 *{title}*"
        try:
            async with Bot(self.token) as bot:
                await bot.send_message(chat_id=self.chat_id, text=text, parse_mode="Markdown")
        except TelegramError as e:
            raise ExternalServiceError(f"Telegram delivery failed: {e}")
        logger.info(f"Sent Telegram notification '{title}'")
