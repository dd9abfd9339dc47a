"""Telegram transport — habit commands and coach chat via Telegram Bot API.

This is the default transport. Requires TELEGRAM_BOT_TOKEN in .env.
"""

import logging
from telegram import Update
from telegram.ext import (
    Application, CommandHandler, MessageHandler,
    ContextTypes, filters,
)

from habitpal import coach, commands
from habitpal.config import TELEGRAM_BOT_TOKEN, set_owner_user_id
from habitpal.tracker import local_today
from habitpal.transport import Transport

log = logging.getLogger(__name__)

_MAX_MESSAGE_CHARS = 4096


def _is_owner(user_id: int) -> bool:
    """Check if user_id matches the configured owner."""
    from habitpal.config import OWNER_USER_ID as current_owner
    return bool(current_owner) and user_id == current_owner


class TelegramTransport(Transport):
    """Telegram Bot API transport."""

    def __init__(self):
        self._app: Application | None = None

    @property
    def name(self) -> str:
        return "telegram"

    async def start(self) -> None:
        if not TELEGRAM_BOT_TOKEN:
            log.warning("TELEGRAM_BOT_TOKEN not set, Telegram transport disabled")
            return

        self._app = Application.builder().token(TELEGRAM_BOT_TOKEN).build()

        self._app.add_handler(CommandHandler("start", self._cmd_start))
        self._app.add_handler(CommandHandler("help", self._cmd_help))
        self._app.add_handler(CommandHandler("habits", self._cmd_habits))
        self._app.add_handler(CommandHandler("new", self._cmd_new))
        self._app.add_handler(CommandHandler("done", self._cmd_done))
        self._app.add_handler(CommandHandler("archive", self._cmd_archive))
        self._app.add_handler(CommandHandler("delete", self._cmd_delete))
        self._app.add_handler(CommandHandler("profile", self._cmd_profile))
        self._app.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_message)
        )

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(drop_pending_updates=True)
        log.info("Telegram transport started")

    async def stop(self) -> None:
        if self._app:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            log.info("Telegram transport stopped")

    async def send_message(self, user_id: int, text: str) -> None:
        if not self._app:
            log.warning("Telegram not started, cannot send message")
            return
        try:
            for i in range(0, len(text), _MAX_MESSAGE_CHARS):
                await self._app.bot.send_message(
                    chat_id=user_id,
                    text=text[i:i + _MAX_MESSAGE_CHARS],
                )
        except Exception as e:
            log.error("Failed to send Telegram message: %s", e)

    # ── Auth ──────────────────────────────────────────────────

    async def _authorize(self, update: Update) -> bool:
        """First user to write becomes the owner; everyone else is turned away."""
        user_id = update.effective_user.id
        from habitpal.config import OWNER_USER_ID as current_owner
        if not current_owner:
            set_owner_user_id(user_id)
            log.info("Owner auto-detected: user_id=%d", user_id)
            return True
        if user_id != current_owner:
            await update.message.reply_text("Sorry, I'm a personal habit coach.")
            return False
        return True

    # ── Handlers ──────────────────────────────────────────────

    async def _cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not await self._authorize(update):
            return
        text = await coach.greet(update.effective_user.id)
        await self.send_message(update.effective_chat.id, text)

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(commands.HELP_TEXT)

    async def _cmd_habits(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        text = commands.habits_overview(update.effective_user.id, local_today())
        await self.send_message(update.effective_chat.id, text)

    async def _cmd_new(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        text = commands.new_habit(update.effective_user.id, " ".join(context.args or []))
        await update.message.reply_text(text)

    async def _cmd_done(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        text = commands.mark_done(update.effective_user.id, context.args or [], local_today())
        await update.message.reply_text(text)

    async def _cmd_archive(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        await update.message.reply_text(
            commands.archive_habit(update.effective_user.id, context.args or [])
        )

    async def _cmd_delete(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        await update.message.reply_text(
            commands.delete_habit(update.effective_user.id, context.args or [])
        )

    async def _cmd_profile(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        await update.message.reply_text(
            commands.update_profile(update.effective_user.id, context.args or [])
        )

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message or not update.message.text:
            return
        if not await self._authorize(update):
            return
        response = await coach.reply(update.effective_user.id, update.message.text)
        if response:
            await self.send_message(update.effective_chat.id, response)
