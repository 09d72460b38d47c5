import asyncio

import pytest

from jirabot.commands import Command, CommandRegistry
from jirabot.commands.jira_commands import (
    NO_SUCH_PROJECT_MESSAGE,
    JiraCommands,
    help_text,
    split_create_args,
)
from jirabot.formatting import NO_RECORDS_MESSAGE, Response
from jirabot.jira.errors import CommandError, CreationError, NotFoundError, RemoteError
from jirabot.jira.models import Issue, Project, SearchResult, User


class FakeJira:
    def __init__(self):
        self.projects = [Project("ABC", "Alphabet"), Project("DEF", "Defaults")]
        self.users: dict[str, User] = {}
        self.issues: dict[str, Issue] = {}
        self.search_result = SearchResult(total=0)
        self.created: list[tuple[str, str, str]] = []
        self.reporters: list[tuple[str, str]] = []
        self.comments: list[tuple[str, str]] = []
        self.searches: list[tuple[str, int]] = []
        self.fail_create = False
        self.fail_comment = False
        self.fail_user_search = False

    def browse_url(self, key: str) -> str:
        return f"https://jira.example.com/browse/{key}"

    def search_url(self, jql: str) -> str:
        return f"https://jira.example.com/issues/?jql={jql}"

    async def list_projects(self):
        return self.projects

    async def find_user(self, query):
        if self.fail_user_search:
            raise RemoteError("search down")
        return self.users.get(query)

    async def create_issue(self, project_key, summary, description):
        if self.fail_create:
            raise CreationError("Unable to create ticket - did you specify a valid project key?")
        self.created.append((project_key, summary, description))
        return Issue(key=f"{project_key}-1", summary=summary, description=description)

    async def set_reporter(self, issue_key, user_login):
        self.reporters.append((issue_key, user_login))

    async def add_comment(self, issue_key, text):
        if self.fail_comment:
            raise RemoteError("comment failed")
        self.comments.append((issue_key, text))

    async def find_issue(self, issue_key):
        if issue_key not in self.issues:
            raise NotFoundError(f"Issue {issue_key} does not exist.")
        return self.issues[issue_key]

    async def search(self, jql, max_results=5):
        self.searches.append((jql, max_results))
        return self.search_result


def _run_create(commands: JiraCommands, args, sender):
    async def run():
        reply = await commands.create(args, sender)
        await asyncio.gather(*list(commands.background_tasks))
        return reply

    return asyncio.run(run())


def test_split_create_args_with_separator():
    assert split_create_args(["ABC", "Fix", "bug", "=&gt;", "steps", "to", "reproduce"]) == (
        "ABC", "Fix bug", "steps to reproduce"
    )


def test_split_create_args_without_separator():
    assert split_create_args(["ABC", "Fix", "the", "bug"]) == ("ABC", "Fix the bug", "")


def test_split_create_args_splits_on_first_separator_only():
    assert split_create_args(["ABC", "a", "=>", "b", "=>", "c"]) == ("ABC", "a", "b => c")


def test_split_create_args_separator_with_nothing_after():
    assert split_create_args(["ABC", "Title", "=&gt;"]) == ("ABC", "Title", "")


def test_split_create_args_requires_key():
    with pytest.raises(CommandError):
        split_create_args([])


def test_projects_lists_keys(sender):
    commands = JiraCommands(FakeJira())

    assert asyncio.run(commands.projects([], sender)) == "JIRA Projects keys: ABC, DEF"


def test_project_hit(sender):
    commands = JiraCommands(FakeJira())

    assert asyncio.run(commands.project(["DEF"], sender)) == "DEF is the key for Defaults"


@pytest.mark.parametrize("count", [0, 1, 50])
def test_project_miss_regardless_of_list_size(sender, count):
    jira = FakeJira()
    jira.projects = [Project(f"P{n}", f"Project {n}") for n in range(count)]
    commands = JiraCommands(jira)

    with pytest.raises(CommandError) as exc:
        asyncio.run(commands.project(["NOPE"], sender))

    assert str(exc.value) == NO_SUCH_PROJECT_MESSAGE


def test_project_match_is_case_sensitive(sender):
    commands = JiraCommands(FakeJira())

    with pytest.raises(CommandError):
        asyncio.run(commands.project(["abc"], sender))


def test_create_replies_with_link_and_attributes(sender):
    jira = FakeJira()
    jira.users["jane@example.com"] = User(name="jdoe", display_name="Jane Doe")
    commands = JiraCommands(jira)

    reply = _run_create(commands, ["ABC", "Fix", "bug", "=&gt;", "steps", "to", "reproduce"], sender)

    assert reply == "Ticket created! Visit https://jira.example.com/browse/ABC-1 to view or edit the ticket."
    assert jira.created == [("ABC", "Fix bug", "steps to reproduce")]
    assert jira.reporters == [("ABC-1", "jdoe")]
    assert jira.comments == [("ABC-1", "Issue created via Slack JiraBot by Jane Doe.")]


def test_create_succeeds_when_follow_ups_fail(sender):
    jira = FakeJira()
    jira.fail_comment = True
    jira.fail_user_search = True
    commands = JiraCommands(jira)

    reply = _run_create(commands, ["ABC", "Fix", "the", "bug"], sender)

    assert "ABC-1" in reply
    assert jira.created == [("ABC", "Fix the bug", "")]
    assert jira.reporters == []


def test_create_unknown_jira_user_leaves_reporter(sender):
    jira = FakeJira()
    commands = JiraCommands(jira)

    _run_create(commands, ["ABC", "Fix"], sender)

    assert jira.reporters == []
    assert len(jira.comments) == 1


def test_create_failure_propagates(sender):
    jira = FakeJira()
    jira.fail_create = True
    commands = JiraCommands(jira)

    with pytest.raises(CreationError):
        _run_create(commands, ["NOPE", "Fix"], sender)

    assert jira.comments == []


def test_create_without_title_is_usage_error(sender):
    jira = FakeJira()

    with pytest.raises(CommandError):
        _run_create(JiraCommands(jira), ["ABC"], sender)

    assert jira.created == []


def test_query_no_records(sender):
    jira = FakeJira()
    commands = JiraCommands(jira)

    reply = asyncio.run(commands.query(["project", "=", "ABC"], sender))

    assert reply == NO_RECORDS_MESSAGE
    assert jira.searches == [("project = ABC", 5)]


def test_query_truncates_to_five(sender):
    jira = FakeJira()
    jira.search_result = SearchResult(
        total=7,
        issues=[Issue(key=f"ABC-{n}", summary=f"S{n}", status="Open") for n in range(1, 6)],
    )
    commands = JiraCommands(jira)

    reply = asyncio.run(commands.query(["project", "=", "ABC"], sender))

    assert isinstance(reply, Response)
    assert len(reply.attachments) == 5
    assert "only display the first 5" in reply.text
    assert reply.attachments[2].title_link == "https://jira.example.com/browse/ABC-3"


def test_query_unescapes_slack_html(sender):
    jira = FakeJira()
    commands = JiraCommands(jira)

    asyncio.run(commands.query(["created", "&gt;=", "-1d"], sender))

    assert jira.searches == [("created >= -1d", 5)]


def test_query_requires_jql(sender):
    with pytest.raises(CommandError):
        asyncio.run(JiraCommands(FakeJira()).query([], sender))


def test_catch_all_builds_card():
    jira = FakeJira()
    jira.issues["ABC-123"] = Issue(key="ABC-123", summary="Login broken", status="Open", reporter="Jane Doe")
    commands = JiraCommands(jira)

    reply = asyncio.run(commands.catch_all("ABC-123"))

    card = reply.attachments[0]
    assert card.fallback == 'ABC-123: "Login broken" (Open).'
    assert card.title_link == "https://jira.example.com/browse/ABC-123"
    assert reply.text == card.fallback
    assert reply.to_message()["text"] == 'ABC-123: "Login broken" (Open).'


def test_catch_all_missing_issue_propagates():
    with pytest.raises(NotFoundError):
        asyncio.run(JiraCommands(FakeJira()).catch_all("ABC-404"))


def test_help_is_built_from_registry(sender):
    commands = JiraCommands(FakeJira(), prefix="!")
    registry = commands.build_registry()

    text = asyncio.run(commands.help([], sender))

    assert text == help_text("!", registry)
    assert "> `!create [KEY] [TITLE] => [DESCRIPTION]` - Create a new ticket" in text
    for name in registry.list_names():
        command = registry.get(name)
        assert command.description
        assert f"> `!{command.usage}` - {command.description}" in text


def test_help_follows_registered_commands():
    registry = CommandRegistry()
    registry.register(Command("ping", "ping [HOST]", None, "Check a host."))

    assert help_text(".", registry) == (
        "Use the following commands:\n"
        "> `.ping [HOST]` - Check a host.\n"
        "I will also listen for ticket keys in the JIRA format (KEY-ID) and look them up for you."
    )


def test_build_registry_is_reused():
    commands = JiraCommands(FakeJira())

    assert commands.build_registry() is commands.build_registry()
