"""
Bot Commands
============

Commands are what users type in the channel, e.g.

    .projects
    .project ABC
    .create ABC Login button does nothing => Clicking login on Safari has no effect
    .query project = ABC AND status = "In Review"
    .help

Each command is a name plus an async handler taking the whitespace-split
arguments and the sender. Handlers return a plain string or a
jirabot.formatting.Response, or raise a JiraError whose message is shown to
the user.

This module provides:
- Sender: who sent the message
- CommandInvocation: one parsed command message
- Command: a name bound to its handler
- CommandRegistry: name -> Command lookup used by the dispatcher
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from jirabot.utils.logger import Logger

if TYPE_CHECKING:
    from jirabot.formatting import Response

logger = Logger("Commands")


@dataclass(frozen=True)
class Sender:
    """
    The Slack user behind a message.

    Attributes:
        user_id: Slack user id (U123ABC)
        display_name: Real name as shown in Slack
        email: Profile email, used to find the matching JIRA user
    """
    user_id: str
    display_name: str
    email: str = ""


@dataclass(frozen=True)
class CommandInvocation:
    """A command message split into its name and argument tokens."""
    name: str
    args: list[str] = field(default_factory=list)


CommandHandler = Callable[[list[str], Sender], Awaitable["str | Response"]]


@dataclass
class Command:
    """
    A chat command.

    Attributes:
        name: What follows the prefix, e.g. "create"
        usage: Invocation shown by help, without the prefix
        handler: Async function run with (args, sender)
        description: What the command does, shown by help after the usage
    """
    name: str
    usage: str
    handler: CommandHandler
    description: str = ""


class CommandRegistry:
    """
    Lookup table of available commands.

    Example:
        registry = CommandRegistry()
        registry.register(Command("projects", "projects", handle_projects, "List project keys."))

        command = registry.get("projects")
        reply = await command.handler([], sender)
    """

    def __init__(self):
        self._commands: dict[str, Command] = {}

    def register(self, command: Command) -> None:
        """
        Register a command.

        Raises:
            ValueError: If a command with this name already exists
        """
        if command.name in self._commands:
            raise ValueError(f"Command '{command.name}' is already registered")

        self._commands[command.name] = command
        logger.debug(f"Registered command: {command.name}")

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def list_names(self) -> list[str]:
        return list(self._commands.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._commands


__all__ = [
    "Sender",
    "CommandInvocation",
    "Command",
    "CommandHandler",
    "CommandRegistry",
]
