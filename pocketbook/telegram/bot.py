from __future__ import annotations

import asyncio
import contextlib
import logging
import textwrap
from decimal import Decimal
from typing import Any

import httpx
from telegram import BotCommand, Update
from telegram.constants import ParseMode
from telegram.ext import (
    AIORateLimiter,
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..config import get_settings
from ..models.transaction import TransactionType
from .api_client import FinanceApiClient
from .helpers import describe_api_error, format_amount_for_display, parse_amount_token

logger = logging.getLogger(__name__)

HELP_OVERVIEW = textwrap.dedent(
    """
    How I can help:

    - /income <amount> [note] - record money coming into your main pocket.
    - /expense <amount> [note] - record money leaving your main pocket.
    - Quick shorthand works too: `i 5000000 salary` or `e 12000 lunch`.
    - /balance - show every pocket and your net worth.
    - /summary [7d|1m|3m] - income, expense and net for a period (default: last 30 days).
    - /recent [n] - list your latest transactions.
    - /cancel <transaction_id> - cancel a transaction and restore balances.
    """
)

TYPE_ALIASES: dict[str, TransactionType] = {
    "e": TransactionType.EXPENSE,
    "exp": TransactionType.EXPENSE,
    "expense": TransactionType.EXPENSE,
    "i": TransactionType.INCOME,
    "inc": TransactionType.INCOME,
    "income": TransactionType.INCOME,
}

SUMMARY_RANGES = {"7d", "1m", "3m"}
RANGE_LABELS = {"7d": "last 7 days", "1m": "this month", "3m": "last 3 months", "default": "last 30 days"}
ALLOWED_UPDATES = ["message"]
RECENT_DEFAULT_LIMIT = 10
RECENT_MAX_LIMIT = 50

_application: Application | None = None
_api_client: FinanceApiClient | None = None
_lock = asyncio.Lock()


def _escape_markdown(text: str) -> str:
    for char in ("_", "*", "`", "["):
        text = text.replace(char, f"\\{char}")
    return text


async def _resolve_user(update: Update, api_client: FinanceApiClient) -> dict[str, Any] | None:
    tele_user = update.effective_user
    if tele_user is None:
        await update.message.reply_text("Could not determine your Telegram user.")
        return None
    try:
        return await api_client.ensure_user(tele_user.id, tele_user.full_name)
    except httpx.HTTPStatusError as exc:
        logger.exception("Failed to ensure Telegram user in backend")
        await update.message.reply_text(f"User sync error: {describe_api_error(exc)}")
    except Exception:
        logger.exception("Failed to ensure Telegram user in backend")
        await update.message.reply_text("Could not sync your Telegram user with the backend.")
    return None


async def _main_pocket(api_client: FinanceApiClient, user_id: str) -> dict[str, Any] | None:
    pockets = await api_client.list_pockets(user_id=user_id, pocket_type="main")
    return pockets[0] if pockets else None


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(
        "Hi! Send `/income <amount> [note]` or `/expense <amount> [note]` to record a transaction.\n"
        "Use /help to see everything else.",
        parse_mode=ParseMode.MARKDOWN,
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    await update.message.reply_text(HELP_OVERVIEW)


async def income(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _record_from_args(update, context, TransactionType.INCOME)


async def expense(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _record_from_args(update, context, TransactionType.EXPENSE)


async def _record_from_args(
    update: Update, context: ContextTypes.DEFAULT_TYPE, tx_type: TransactionType
) -> None:
    if not update.message:
        return
    args = list(getattr(context, "args", []) or [])
    if not args:
        await update.message.reply_text(
            f"Usage: `/{tx_type.value} 12000 lunch`", parse_mode=ParseMode.MARKDOWN
        )
        return
    note = " ".join(args[1:]).strip() or None
    await _create_transaction(update, context, tx_type, args[0], note)


async def free_text_transaction(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle quick entries like ``e 12000 lunch``."""
    if not update.message or not update.message.text:
        return
    tokens = update.message.text.split()
    tx_type = TYPE_ALIASES.get(tokens[0].lower()) if tokens else None
    if tx_type is None or len(tokens) < 2:
        await update.message.reply_text("I did not understand that. Try /help.")
        return
    note = " ".join(tokens[2:]).strip() or None
    await _create_transaction(update, context, tx_type, tokens[1], note)


async def _create_transaction(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    tx_type: TransactionType,
    amount_raw: str,
    note: str | None,
) -> None:
    try:
        amount = parse_amount_token(amount_raw)
    except ValueError as exc:
        await update.message.reply_text(str(exc))
        return

    api_client: FinanceApiClient = context.application.bot_data["api_client"]
    user = await _resolve_user(update, api_client)
    if user is None:
        return

    try:
        pocket = await _main_pocket(api_client, user["id"])
    except httpx.HTTPStatusError as exc:
        await update.message.reply_text(f"Could not load your pockets: {describe_api_error(exc)}")
        return
    if pocket is None:
        await update.message.reply_text("You have no main pocket yet. Try /start again later.")
        return

    pocket_field = "pocket_to_id" if tx_type == TransactionType.INCOME else "pocket_from_id"
    payload: dict[str, Any] = {
        "type": tx_type.value,
        "amount": str(amount),
        "currency": get_settings().default_currency,
        "user_id": user["id"],
        pocket_field: pocket["id"],
        "note": note,
        "ref": "telegram",
    }
    try:
        data = await api_client.create_transaction(payload)
    except httpx.HTTPStatusError as exc:
        await update.message.reply_text(f"Could not save: {describe_api_error(exc)}")
        return
    except Exception:
        logger.exception("Failed to create transaction via API")
        await update.message.reply_text("Something went wrong while saving the transaction.")
        return

    transaction = data["transaction"]
    amount_text = format_amount_for_display(transaction["amount"], transaction["currency"])
    note_text = _escape_markdown(transaction.get("note") or "no note")
    lines = [f"Saved {transaction['type']} of {amount_text} for *{note_text}*."]
    distribution = data.get("distribution")
    if distribution and distribution.get("distributions"):
        for entry in distribution["distributions"]:
            share = format_amount_for_display(entry["allocated_amount"], transaction["currency"])
            lines.append(f"- {_escape_markdown(entry['allocation_name'])}: {share}")
        free_cash = format_amount_for_display(distribution["free_cash"], transaction["currency"])
        lines.append(f"Free cash: {free_cash}")
    lines.append(f"ID: `{transaction['id']}`")
    await update.message.reply_text("\n".join(lines), parse_mode=ParseMode.MARKDOWN)


async def balance(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    api_client: FinanceApiClient = context.application.bot_data["api_client"]
    user = await _resolve_user(update, api_client)
    if user is None:
        return
    try:
        pockets = await api_client.list_pockets(user_id=user["id"])
    except httpx.HTTPStatusError as exc:
        await update.message.reply_text(f"Could not load your pockets: {describe_api_error(exc)}")
        return

    currency = get_settings().default_currency
    total = Decimal("0")
    lines = ["Pockets:"]
    for pocket in pockets:
        value = Decimal(str(pocket["balance"]))
        if pocket.get("is_active", True):
            total += value
        flags = []
        if pocket.get("is_locked"):
            flags.append("locked")
        if not pocket.get("is_active", True):
            flags.append("inactive")
        suffix = f" ({', '.join(flags)})" if flags else ""
        lines.append(f"- {pocket['name']}: {format_amount_for_display(value, currency)}{suffix}")
    lines.append(f"Net worth: {format_amount_for_display(total, currency)}")
    await update.message.reply_text("\n".join(lines))


async def summary(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    args = list(getattr(context, "args", []) or [])
    time_range = args[0].lower() if args else "default"
    if time_range != "default" and time_range not in SUMMARY_RANGES:
        await update.message.reply_text("Supported ranges: 7d, 1m, 3m.")
        return

    api_client: FinanceApiClient = context.application.bot_data["api_client"]
    user = await _resolve_user(update, api_client)
    if user is None:
        return
    try:
        data = await api_client.dashboard_summary(user_id=user["id"], time_range=time_range)
    except httpx.HTTPStatusError as exc:
        await update.message.reply_text(f"Could not load the summary: {describe_api_error(exc)}")
        return

    currency = get_settings().default_currency
    await update.message.reply_text(
        "\n".join(
            [
                f"Summary for {RANGE_LABELS[time_range]} ({data['start']} to today):",
                f"Income: {format_amount_for_display(data['period_income'], currency)}",
                f"Expense: {format_amount_for_display(data['period_expense'], currency)}",
                f"Net: {format_amount_for_display(data['period_net'], currency)}",
                f"Net worth: {format_amount_for_display(data['total_net_worth'], currency)}",
            ]
        )
    )


async def recent(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    args = list(getattr(context, "args", []) or [])
    limit = RECENT_DEFAULT_LIMIT
    if args:
        try:
            limit = max(1, min(int(args[0]), RECENT_MAX_LIMIT))
        except ValueError:
            await update.message.reply_text("Usage: /recent [n]")
            return

    api_client: FinanceApiClient = context.application.bot_data["api_client"]
    user = await _resolve_user(update, api_client)
    if user is None:
        return
    try:
        transactions = await api_client.list_transactions(user_id=user["id"], limit=limit)
    except httpx.HTTPStatusError as exc:
        await update.message.reply_text(f"Could not fetch transactions: {describe_api_error(exc)}")
        return

    if not transactions:
        await update.message.reply_text("No transactions yet.")
        return
    lines = ["Recent transactions:"]
    for tx in transactions:
        amount_text = format_amount_for_display(tx["amount"], tx["currency"])
        day = str(tx["date"])[:10]
        note = _escape_markdown(tx.get("note") or "-")
        lines.append(f"{day} {tx['type']} {amount_text} {note}\n`{tx['id']}`")
    await update.message.reply_text("\n".join(lines), parse_mode=ParseMode.MARKDOWN)


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    args = list(getattr(context, "args", []) or [])
    if len(args) != 1:
        await update.message.reply_text("Usage: `/cancel <transaction_id>`", parse_mode=ParseMode.MARKDOWN)
        return

    api_client: FinanceApiClient = context.application.bot_data["api_client"]
    user = await _resolve_user(update, api_client)
    if user is None:
        return
    try:
        data = await api_client.cancel_transaction(args[0], user_id=user["id"])
    except httpx.HTTPStatusError as exc:
        await update.message.reply_text(f"Could not cancel: {describe_api_error(exc)}")
        return
    amount_text = format_amount_for_display(data["amount"], data["currency"])
    await update.message.reply_text(f"Cancelled {data['type']} of {amount_text}. Balances restored.")


def _create_application(token: str, api_client: FinanceApiClient) -> Application:
    application = (
        Application.builder()
        .token(token)
        .rate_limiter(AIORateLimiter())
        .build()
    )
    application.bot_data["api_client"] = api_client
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("income", income))
    application.add_handler(CommandHandler("expense", expense))
    application.add_handler(CommandHandler("balance", balance))
    application.add_handler(CommandHandler("summary", summary))
    application.add_handler(CommandHandler("recent", recent))
    application.add_handler(CommandHandler("cancel", cancel))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, free_text_transaction))
    return application


async def init_bot() -> None:
    """Initialise the Telegram bot and register the webhook."""
    settings = get_settings()
    if not settings.telegram_bot_token or not settings.telegram_webhook_secret:
        logger.info("Telegram bot or webhook secret not configured; skipping bot initialisation.")
        return
    if not settings.backend_base_url:
        logger.warning("BACKEND_BASE_URL is missing; skipping Telegram webhook setup.")
        return

    base_url = str(settings.backend_base_url)
    webhook_url = base_url.rstrip("/") + f"/api/telegram/webhook/{settings.telegram_webhook_secret}"

    api_base_url = str(settings.internal_backend_base_url or settings.backend_base_url)

    async with _lock:
        global _application, _api_client
        if _application is not None:
            return

        api_client = FinanceApiClient(api_base_url)
        application = _create_application(settings.telegram_bot_token, api_client)

        try:
            await application.initialize()
            await application.start()
            try:
                await application.bot.set_my_commands(
                    [
                        BotCommand("start", "Show welcome message"),
                        BotCommand("help", "List bot features"),
                        BotCommand("income", "Record income into the main pocket"),
                        BotCommand("expense", "Record an expense from the main pocket"),
                        BotCommand("balance", "Show pocket balances"),
                        BotCommand("summary", "Show income and expense for a period"),
                        BotCommand("recent", "Show recent transactions"),
                        BotCommand("cancel", "Cancel a transaction"),
                    ]
                )
            except Exception:
                logger.exception("Failed to set Telegram command list.")
            if settings.telegram_register_webhook_on_start:
                await application.bot.set_webhook(
                    url=webhook_url, drop_pending_updates=False, allowed_updates=ALLOWED_UPDATES
                )
        except Exception:
            logger.exception("Failed to initialise Telegram webhook; bot disabled for this run.")
            with contextlib.suppress(Exception):
                await application.stop()
            with contextlib.suppress(Exception):
                await application.shutdown()
            await api_client.aclose()
            return

        _application = application
        _api_client = api_client
        logger.info("Telegram webhook configured at %s", webhook_url)


def bot_is_running() -> bool:
    return _application is not None


async def handle_update(payload: dict[str, Any]) -> None:
    """Process a Telegram update forwarded by FastAPI."""
    async with _lock:
        if _application is None:
            raise RuntimeError("Telegram bot is not initialised.")
        application = _application
    update = Update.de_json(payload, application.bot)
    await application.process_update(update)


async def shutdown_bot() -> None:
    """Tear down the Telegram bot."""
    async with _lock:
        global _application, _api_client
        if _application is None:
            return
        await _application.stop()
        await _application.shutdown()
        if _api_client:
            await _api_client.aclose()
        _application = None
        _api_client = None
