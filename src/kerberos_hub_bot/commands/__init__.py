from .dispatch import (
    CommandInvocation,
    Responder,
    dispatch_command,
    parse_command,
    split_command_args,
)
from .handlers import CommandContext

__all__ = [
    "CommandContext",
    "CommandInvocation",
    "Responder",
    "dispatch_command",
    "parse_command",
    "split_command_args",
]
