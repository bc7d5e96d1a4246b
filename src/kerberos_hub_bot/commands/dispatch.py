from __future__ import annotations

from dataclasses import dataclass, field

from .handlers import (
    CommandContext,
    Responder,
    handle_help,
    handle_login,
    handle_logout,
    handle_profile,
    unknown_command_text,
    usage_text,
)


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    subcommand: str | None
    args: tuple[str, ...] = field(default_factory=tuple)


def split_command_args(text: str) -> tuple[str, ...]:
    # No quoting support: a password containing whitespace cannot be passed.
    return tuple(text.split())


def parse_command(text: str) -> CommandInvocation:
    tokens = split_command_args(text)
    if not tokens:
        return CommandInvocation(subcommand=None)
    return CommandInvocation(subcommand=tokens[0].lower(), args=tokens[1:])


async def dispatch_command(ctx: CommandContext, text: str) -> CommandInvocation:
    invocation = parse_command(text)
    subcommand = invocation.subcommand
    if subcommand is None:
        await ctx.respond(usage_text(ctx.slash_command))
    elif subcommand == "login":
        await handle_login(ctx, invocation.args)
    elif subcommand == "profile":
        await handle_profile(ctx)
    elif subcommand == "logout":
        await handle_logout(ctx)
    elif subcommand == "help":
        await handle_help(ctx)
    else:
        await ctx.respond(unknown_command_text(ctx.slash_command, subcommand))
    return invocation


__all__ = [
    "CommandInvocation",
    "Responder",
    "dispatch_command",
    "parse_command",
    "split_command_args",
]
