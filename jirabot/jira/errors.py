"""
JIRA Errors
===========

Every failure a command can hit is one of these. Each carries a message that
is safe to show in the channel; the dispatcher posts `str(error)` verbatim.

    JiraError
    ├── RemoteError        transport or auth failure talking to JIRA
    │   └── NotFoundError  the key or lookup resolved to nothing
    ├── CreationError      JIRA rejected a new ticket
    ├── QueryError         malformed JQL or the search call failed
    └── CommandError       bad command usage, caught before calling JIRA
"""


class JiraError(Exception):
    """Base class for errors surfaced to the chat user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RemoteError(JiraError):
    """
    A call to the JIRA server failed.

    Attributes:
        status_code: HTTP status, or None for connection/timeout failures
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RemoteError):
    """The requested issue (or other resource) does not exist."""


class CreationError(JiraError):
    """JIRA refused to create a ticket, usually because of a bad project key."""


class QueryError(JiraError):
    """A JQL search could not be run."""


class CommandError(JiraError):
    """The command itself was wrong: missing arguments, unknown project key."""
