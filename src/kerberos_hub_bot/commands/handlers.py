from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..kerberos import KerberosClient, extract_token
from ..logging_setup import get_logger
from ..profile import format_profile
from ..sessions import Session, SessionStore

logger = get_logger(__name__)

Responder = Callable[[str], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class CommandContext:
    user_id: str
    respond: Responder
    api: KerberosClient
    sessions: SessionStore
    slash_command: str = "/hub"


def usage_text(cmd: str) -> str:
    return (
        "Please specify a command. Available commands:\n"
        f"• `{cmd} login <username> <password>` - Login to Kerberos.io\n"
        f"• `{cmd} profile` - View your profile\n"
        f"• `{cmd} logout` - Logout from Kerberos.io\n"
        f"• `{cmd} help` - Show this help message"
    )


def login_usage_text(cmd: str) -> str:
    return (
        f"Usage: `{cmd} login <username> <password>`\n\n"
        "⚠️ *Note:* This is for demonstration. In production, use OAuth or "
        "secure token-based authentication."
    )


def not_logged_in_text(cmd: str) -> str:
    return (
        "❌ You are not logged in. "
        f"Please use `{cmd} login <username> <password>` first."
    )


def unknown_command_text(cmd: str, subcommand: str) -> str:
    return (
        f"Unknown command: `{subcommand}`. "
        f"Use `{cmd} help` to see available commands."
    )


def help_text(cmd: str) -> str:
    return (
        "*Kerberos.io Hub Bot - Available Commands*\n\n"
        "🔐 *Authentication*\n"
        f"• `{cmd} login <username> <password>` - Login to Kerberos.io\n"
        f"• `{cmd} logout` - Logout from current session\n\n"
        "📊 *Information*\n"
        f"• `{cmd} profile` - View your profile information\n\n"
        "❓ *Help*\n"
        f"• `{cmd} help` - Show this help message\n\n"
        "⚠️ *Security Note:* Passing passwords in Slack commands is for "
        "demonstration purposes. In production, use OAuth or secure "
        "authentication methods."
    )


async def handle_login(ctx: CommandContext, args: tuple[str, ...]) -> None:
    cmd = ctx.slash_command
    if len(args) < 2:
        await ctx.respond(login_usage_text(cmd))
        return

    username, password = args[0], args[1]
    await ctx.respond("🔐 Authenticating with Kerberos.io...")

    result = await ctx.api.login(username, password)
    token = extract_token(result.data) if result.success else None
    if not result.success or token is None:
        error = result.error if not result.success else "no token in response"
        logger.info("command.login_failed", user_id=ctx.user_id)
        await ctx.respond(
            f"❌ Login failed: {error}\n\n"
            "_Note: Make sure the API endpoint is correct and your credentials "
            "are valid._"
        )
        return

    ctx.sessions.set(ctx.user_id, Session(token=token, username=username))
    logger.info("command.login", user_id=ctx.user_id)
    await ctx.respond(
        f"✅ Successfully logged in as *{username}*!\n\n"
        "You can now use:\n"
        f"• `{cmd} profile` to view your profile\n"
        f"• `{cmd} logout` to logout"
    )


async def handle_profile(ctx: CommandContext) -> None:
    cmd = ctx.slash_command
    session = ctx.sessions.get(ctx.user_id)
    if session is None:
        await ctx.respond(not_logged_in_text(cmd))
        return

    await ctx.respond("📊 Fetching your profile...")

    result = await ctx.api.profile(session.token)
    if result.success:
        profile = result.data if isinstance(result.data, dict) else {}
        await ctx.respond(format_profile(profile))
        return

    await ctx.respond(
        f"❌ Failed to fetch profile: {result.error}\n\n"
        "_Your session may have expired. "
        f"Try logging in again with `{cmd} login`._"
    )
    # Any profile failure invalidates the session, network errors included.
    ctx.sessions.delete(ctx.user_id)
    logger.info("command.session_cleared", user_id=ctx.user_id)


async def handle_logout(ctx: CommandContext) -> None:
    session = ctx.sessions.get(ctx.user_id)
    if session is None:
        await ctx.respond("❌ You are not logged in.")
        return

    ctx.sessions.delete(ctx.user_id)
    logger.info("command.logout", user_id=ctx.user_id)
    await ctx.respond(f"✅ Successfully logged out from *{session.username}*.")


async def handle_help(ctx: CommandContext) -> None:
    await ctx.respond(help_text(ctx.slash_command))
