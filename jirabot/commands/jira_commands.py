"""
JIRA Commands
=============

Handlers for every chat command, plus the ticket lookup behind passive
key mentions.

Command Flow:
    args + sender
         │
         ▼
    Validate arguments ──(bad)──▶ CommandError
         │
         ▼
    JiraClient call (cache first where it applies)
         │
         ▼
    Format as text or attachments

Follow-up work after `.create` (setting the reporter, posting the attribution
comment) runs as detached tasks: the reply does not wait for them and their
failures are logged, never shown.
"""

import asyncio
import html
from typing import Awaitable

from jirabot.commands import Command, CommandRegistry, Sender
from jirabot.formatting import Response, issue_attachment, search_response
from jirabot.jira.client import JiraClient
from jirabot.jira.errors import CommandError
from jirabot.utils.logger import Logger

logger = Logger("JiraCommands")

# Slack HTML-escapes ">" in message text, so "=>" arrives as "=&gt;".
DESCRIPTION_SEPARATORS = ("=&gt;", "=>")

QUERY_MAX_RESULTS = 5

NO_SUCH_PROJECT_MESSAGE = "Err: No such project key found."


def split_create_args(args: list[str]) -> tuple[str, str, str]:
    """
    Split `.create` arguments into project key, summary and description.

    The first token is the project key. The rest is the summary, up to the
    first `=>` token; anything after it is the description.

        ["ABC", "Fix", "bug", "=&gt;", "steps"]  ->  ("ABC", "Fix bug", "steps")
        ["ABC", "Fix", "the", "bug"]             ->  ("ABC", "Fix the bug", "")

    Raises:
        CommandError: If there is no project key
    """
    if not args:
        raise CommandError("Usage: create [KEY] [TITLE] => [DESCRIPTION]")

    key, params = args[0], args[1:]
    index = next((i for i, token in enumerate(params) if token in DESCRIPTION_SEPARATORS), -1)

    if index >= 0:
        summary = " ".join(params[:index])
        description = " ".join(params[index + 1:])
    else:
        summary = " ".join(params)
        description = ""

    return key, summary, description


def help_text(prefix: str, registry: CommandRegistry) -> str:
    """Render one line per registered command, in registration order."""
    lines = ["Use the following commands:"]
    for name in registry.list_names():
        command = registry.get(name)
        lines.append(f"> `{prefix}{command.usage}` - {command.description}")
    lines.append("I will also listen for ticket keys in the JIRA format (KEY-ID) and look them up for you.")
    return "\n".join(lines)


class JiraCommands:
    """
    The bot's command handlers, bound to one JiraClient.

    Example:
        commands = JiraCommands(client, prefix=".")
        registry = commands.build_registry()

        reply = await commands.project(["ABC"], sender)
        card = await commands.catch_all("ABC-123")

    Args:
        client: JIRA client used by every handler
        prefix: Command prefix, only used to render help
    """

    def __init__(self, client: JiraClient, prefix: str = "."):
        self.client = client
        self.prefix = prefix
        self._registry: CommandRegistry | None = None
        # Strong references so detached tasks are not garbage collected mid-flight
        self.background_tasks: set[asyncio.Task] = set()

    def build_registry(self) -> CommandRegistry:
        """Return the registry holding every command, creating it on first use."""
        if self._registry is not None:
            return self._registry

        registry = CommandRegistry()
        registry.register(Command(
            "projects", "projects", self.projects,
            "Get a list of all projects keys.",
        ))
        registry.register(Command(
            "project", "project [KEY]", self.project,
            "Get information about a specific project.",
        ))
        registry.register(Command(
            "create", "create [KEY] [TITLE] => [DESCRIPTION]", self.create,
            "Create a new ticket in the selected project; the `=> [DESCRIPTION]` part is optional.",
        ))
        registry.register(Command(
            "query", "query [JQL]", self.query,
            f"Search for tickets with a JQL query (first {QUERY_MAX_RESULTS} results are shown).",
        ))
        registry.register(Command("help", "help", self.help, "Show this message."))
        self._registry = registry
        return registry

    # ----- Detached tasks -----

    def _detach(self, coro: Awaitable[None], what: str) -> None:
        """Run `coro` in the background; log and discard any failure."""
        async def runner() -> None:
            try:
                await coro
            except Exception as e:
                logger.warning(f"Best-effort {what} failed", {
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                })

        task = asyncio.create_task(runner())
        self.background_tasks.add(task)
        task.add_done_callback(self.background_tasks.discard)

    async def _assign_reporter(self, issue_key: str, sender: Sender) -> None:
        if not sender.email:
            logger.debug(f"No email for {sender.user_id}, leaving reporter on {issue_key}")
            return

        user = await self.client.find_user(sender.email)
        if user is None:
            logger.info(f"No JIRA user for {sender.email}, leaving reporter on {issue_key}")
            return

        await self.client.set_reporter(issue_key, user.name)

    # ----- Commands -----

    async def projects(self, args: list[str], sender: Sender) -> str:
        projects = await self.client.list_projects()
        return "JIRA Projects keys: " + ", ".join(p.key for p in projects)

    async def project(self, args: list[str], sender: Sender) -> str:
        """Describe one project; the key must match exactly, case included."""
        if not args:
            raise CommandError(f"Usage: `{self.prefix}project [KEY]`")

        key = args[0]
        for project in await self.client.list_projects():
            if project.key == key:
                return f"{project.key} is the key for {project.name}"

        raise CommandError(NO_SUCH_PROJECT_MESSAGE)

    async def create(self, args: list[str], sender: Sender) -> str:
        """
        Create a ticket and reply with its link.

        Once JIRA accepts the ticket the reply is sent straight away; the
        reporter is switched to the sender's JIRA account and an attribution
        comment is added in the background.
        """
        key, summary, description = split_create_args(args)
        if not summary:
            raise CommandError(f"Usage: `{self.prefix}create [KEY] [TITLE] => [DESCRIPTION]`")

        issue = await self.client.create_issue(key, html.unescape(summary), html.unescape(description))
        logger.info(f"{sender.display_name} created {issue.key}")

        self._detach(self._assign_reporter(issue.key, sender), f"reporter update on {issue.key}")
        self._detach(
            self.client.add_comment(
                issue.key, f"Issue created via Slack JiraBot by {sender.display_name}."
            ),
            f"attribution comment on {issue.key}",
        )

        return f"Ticket created! Visit {self.client.browse_url(issue.key)} to view or edit the ticket."

    async def query(self, args: list[str], sender: Sender) -> "str | Response":
        """Run a JQL search and show the first few hits as attachments."""
        if not args:
            raise CommandError(f"Usage: `{self.prefix}query [JQL]`")

        jql = html.unescape(" ".join(args))
        result = await self.client.search(jql, max_results=QUERY_MAX_RESULTS)
        logger.debug(f"Query matched {result.total} issues", {"jql": jql})

        return search_response(
            result,
            self.client.search_url(jql),
            {issue.key: self.client.browse_url(issue.key) for issue in result.issues},
        )

    async def catch_all(self, issue_key: str) -> Response:
        """Look up a ticket mentioned in conversation and show it as a card."""
        issue = await self.client.find_issue(issue_key)
        attachment = issue_attachment(issue, self.client.browse_url(issue.key))
        return Response(text=attachment.fallback, attachments=[attachment])

    async def help(self, args: list[str], sender: Sender) -> str:
        return help_text(self.prefix, self.build_registry())
