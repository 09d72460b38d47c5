"""
Command Dispatcher
==================

Routes every inbound chat message.

Routing:
    1. Text starts with the prefix and names a known command
       -> run that command with the remaining whitespace-split tokens
    2. Otherwise, text contains a ticket key (ABC-123) and does not already
       contain a link to our JIRA host
       -> look the ticket up and show it
    3. Otherwise -> stay silent

Replies go out through a ChatTransport. A JiraError becomes a visible
warning in the same channel; anything unexpected is logged and answered
with a generic apology.
"""

import re
from typing import Awaitable, Callable, Protocol

from jirabot.commands import CommandInvocation, CommandRegistry, Sender
from jirabot.formatting import Response, as_response
from jirabot.jira.errors import JiraError
from jirabot.utils.logger import Logger

logger = Logger("Dispatcher")

TICKET_KEY_RE = re.compile(r"\b([A-Z]+-\d+)\b")

GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error processing your request."


class ChatTransport(Protocol):
    """Something that can deliver a reply to a chat channel."""

    async def send(self, channel: str, response: Response) -> None:
        ...


PassiveHandler = Callable[[str], Awaitable["str | Response"]]


class CommandDispatcher:
    """
    Maps inbound messages to command handlers.

    Example:
        commands = JiraCommands(client, prefix=".")
        dispatcher = CommandDispatcher(
            registry=commands.build_registry(),
            passive_handler=commands.catch_all,
            transport=SlackTransport(app.client),
            jira_host="jira.example.com",
        )

        await dispatcher.handle("C123", ".projects", sender)

    Args:
        registry: Available commands
        passive_handler: Called with a ticket key found in ordinary chatter
        transport: Where replies are sent
        jira_host: Messages containing this host are not passively matched
        prefix: Command prefix
    """

    def __init__(
        self,
        registry: CommandRegistry,
        passive_handler: PassiveHandler,
        transport: ChatTransport,
        jira_host: str,
        prefix: str = "."
    ):
        self.registry = registry
        self.passive_handler = passive_handler
        self.transport = transport
        self.jira_host = jira_host
        self.prefix = prefix

    def parse(self, text: str) -> CommandInvocation | None:
        """
        Parse `text` as a command.

        Returns:
            The invocation, or None if the text is not a known command
        """
        text = text.strip()
        if not self.prefix or not text.startswith(self.prefix):
            return None

        tokens = text[len(self.prefix):].split()
        if not tokens or tokens[0] not in self.registry:
            return None

        return CommandInvocation(name=tokens[0], args=tokens[1:])

    def match_ticket_key(self, text: str) -> str | None:
        """
        Find the first ticket key in free text.

        Returns None when there is no key, or when the message already
        contains our JIRA host (someone pasted a link; no need to repeat it).
        """
        match = TICKET_KEY_RE.search(text)
        if not match:
            return None
        if self.jira_host and self.jira_host in text:
            return None
        return match.group(1).upper()

    async def dispatch(self, text: str, sender: Sender) -> "str | Response | None":
        """
        Run whatever `text` asks for and return the reply.

        Returns:
            The reply, or None when the message needs no response

        Raises:
            JiraError: When the command fails in a way the user should see
        """
        invocation = self.parse(text)
        if invocation is not None:
            command = self.registry.get(invocation.name)
            logger.info(f"{self.prefix}{invocation.name} from {sender.display_name}", {
                "args": invocation.args,
            })
            return await command.handler(invocation.args, sender)

        issue_key = self.match_ticket_key(text)
        if issue_key is not None:
            logger.info(f"Ticket key {issue_key} mentioned by {sender.display_name}")
            return await self.passive_handler(issue_key)

        return None

    async def handle(self, channel: str, text: str, sender: Sender) -> None:
        """Dispatch a message and deliver the reply (or the error) to `channel`."""
        try:
            result = await self.dispatch(text, sender)
        except JiraError as e:
            logger.warning(f"Command failed in {channel}: {e.message}")
            await self.transport.send(channel, Response(text=f":warning: {e.message}"))
            return
        except Exception as e:
            logger.error(f"Error handling message in {channel}", e)
            await self.transport.send(channel, Response(text=GENERIC_ERROR_MESSAGE))
            return

        if result is None:
            return

        await self.transport.send(channel, as_response(result))
