"""Telegram handlers for the quiz."""
import logging
from typing import List, Optional, Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CallbackContext

from rangequiz.config import settings
from rangequiz.models.quiz_models import AnswerResult, Item
from rangequiz.services.progress_service import ProgressService
from rangequiz.services.reference_loader import ReferenceLoader, resolve_source
from rangequiz.services.session_service import QuizSession, bootstrap_session
from rangequiz.services.storage import SqlKeyValueStorage

# Get logger for this module
logger = logging.getLogger(__name__)

SESSION_KEY = "quiz_session"

# Callback data
CB_ANSWER_PREFIX = "answer_"
CB_NEXT = "next"
CB_RELOAD = "reload"

# Button texts
NEXT_HAND = "➡️ Next hand"
RELOAD = "🔄 Reload"

PLAYER_COLOR_LABELS = {
    0: "グレー",
    1: "ピンク",
    2: "紫",
    3: "白",
    5: "水色",
    7: "緑",
    8: "オレンジ",
    9: "赤",
    10: "紺",
}

MSG_LOADING = "Loading hands..."
MSG_NO_HANDS = "The reference table has no hands."
MSG_NOT_STARTED = "Please /start first"


def answer_button_text(value: int) -> str:
    label = PLAYER_COLOR_LABELS.get(value)
    return f"{value} {label}" if label else str(value)


def build_answer_keyboard(hand: str, options: List[int]) -> InlineKeyboardMarkup:
    """Answer buttons split into two rows at the midpoint, tagged with the hand they answer."""
    midpoint = (len(options) + 1) // 2
    rows = [options[:midpoint], options[midpoint:]]
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(answer_button_text(value), callback_data=f"{CB_ANSWER_PREFIX}{hand}:{value}") for value in row]
        for row in rows if row
    ])


def build_next_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton(NEXT_HAND, callback_data=CB_NEXT)]])


def build_reload_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton(RELOAD, callback_data=CB_RELOAD)]])


def format_question(item: Item) -> str:
    return f"🃏 Hand: {item.hand}\n\nHow many Players?"


def format_result(result: AnswerResult) -> str:
    """Result text with the correct answer and the hand's category."""
    headline = "✅ Correct!" if result.is_correct else f"❌ Incorrect ({result.selected_value})"
    return (
        f"🃏 Hand: {result.item.hand}\n\n"
        f"{headline}\n"
        f"Answer: {result.item.players} Players / {result.item.color}"
    )


def parse_answer(data: str) -> Optional[Tuple[str, int]]:
    """Extract the hand and the answer value from callback data."""
    if not data.startswith(CB_ANSWER_PREFIX):
        return None
    hand, _, value = data[len(CB_ANSWER_PREFIX):].rpartition(":")
    if not hand:
        return None
    try:
        return hand, int(value)
    except ValueError:
        return None


def make_progress_service(chat_id: int) -> ProgressService:
    """Progress of each chat is kept under its own storage key."""
    return ProgressService(SqlKeyValueStorage(), f"{settings.quiz.storage_key}:{chat_id}")


def get_session(context: CallbackContext) -> Optional[QuizSession]:
    return context.chat_data.get(SESSION_KEY)


async def start_quiz(update: Update, context: CallbackContext) -> Optional[QuizSession]:
    """Bootstrap a fresh session for the chat and show its first hand."""
    chat_id = update.effective_chat.id
    source = resolve_source(settings.quiz.base_path, settings.quiz.reference_file)
    result = await bootstrap_session(ReferenceLoader(), make_progress_service(chat_id), source)

    if not result.ok:
        context.chat_data.pop(SESSION_KEY, None)
        await update.effective_message.reply_text(result.error, reply_markup=build_reload_keyboard())
        return None

    session = result.session
    context.chat_data[SESSION_KEY] = session
    if session.current is None:
        await update.effective_message.reply_text(MSG_NO_HANDS, reply_markup=build_reload_keyboard())
        return session

    await update.effective_message.reply_text(
        format_question(session.current),
        reply_markup=build_answer_keyboard(session.current.hand, settings.quiz.answer_options),
    )
    return session


async def handle_start(update: Update, context: CallbackContext) -> None:
    """Handle the /start command."""
    logger.info(f"Starting quiz for chat {update.effective_chat.id}")
    await update.message.reply_text(MSG_LOADING)
    await start_quiz(update, context)


async def handle_callback(update: Update, context: CallbackContext) -> None:
    """Handle answer, next and reload buttons."""
    query = update.callback_query
    await query.answer()
    logger.debug(f"Callback {query.data} from chat {update.effective_chat.id}")

    if query.data == CB_RELOAD:
        await query.edit_message_reply_markup(reply_markup=None)
        await start_quiz(update, context)
        return

    session = get_session(context)
    if session is None:
        await query.edit_message_text(MSG_NOT_STARTED)
        return

    if query.data == CB_NEXT:
        await handle_next(update, session)
        return

    answer = parse_answer(query.data)
    if answer is not None:
        hand, value = answer
        await handle_answer(update, session, hand, value)
    else:
        logger.warning(f"Unknown callback data: {query.data}")


async def handle_answer(update: Update, session: QuizSession, hand: str, value: int) -> None:
    """Submit an answer and replace the buttons with the result."""
    if session.current is None or session.current.hand != hand:
        # Keyboard of a question from an earlier session
        logger.debug(f"Ignoring stale answer for {hand}")
        await update.callback_query.edit_message_reply_markup(reply_markup=None)
        return
    if session.is_answered:
        # Duplicate tap on a stale keyboard
        return
    session.submit_answer(value)
    result = session.result()
    if result is None:
        return
    await update.callback_query.edit_message_text(format_result(result), reply_markup=build_next_keyboard())


async def handle_next(update: Update, session: QuizSession) -> None:
    """Show the next hand once the current one has been answered."""
    if not session.is_answered:
        return
    item = session.select_next()
    if item is None:
        await update.callback_query.edit_message_text(MSG_NO_HANDS, reply_markup=build_reload_keyboard())
        return
    await update.callback_query.edit_message_reply_markup(reply_markup=None)
    await update.effective_message.reply_text(
        format_question(item),
        reply_markup=build_answer_keyboard(item.hand, settings.quiz.answer_options),
    )
