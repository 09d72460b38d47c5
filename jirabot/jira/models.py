"""
JIRA Data Models
================

Plain dataclasses for the parts of JIRA's REST payloads the bot uses.
Each has a `from_api` constructor that tolerates missing or null fields,
since JIRA omits e.g. `assignee` entirely on unassigned issues.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Project:
    """A JIRA project: short uppercase key plus display name."""
    key: str
    name: str

    @classmethod
    def from_api(cls, data: dict) -> "Project":
        return cls(key=data.get("key", ""), name=data.get("name", ""))


@dataclass(frozen=True)
class User:
    """
    A JIRA user account.

    Attributes:
        name: Login name, used when setting an issue's reporter
        display_name: Human readable name
        email: Email address (may be empty if hidden by JIRA)
    """
    name: str
    display_name: str
    email: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "User":
        return cls(
            name=data.get("name") or data.get("key") or "",
            display_name=data.get("displayName") or "",
            email=data.get("emailAddress") or "",
        )


def _display_name(person: dict | None) -> str | None:
    if not person:
        return None
    return person.get("displayName") or person.get("name")


@dataclass(frozen=True)
class Issue:
    """
    A JIRA issue as shown in chat.

    Attributes:
        key: Issue key, e.g. ABC-123
        summary: One line title
        description: Body text (empty if none)
        status: Status name, e.g. "In Review"
        status_category: Status category name, e.g. "In Progress"
        reporter: Reporter display name, None if unknown
        assignee: Assignee display name, None if unassigned
    """
    key: str
    summary: str = ""
    description: str = ""
    status: str = ""
    status_category: str = ""
    reporter: str | None = None
    assignee: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Issue":
        fields: dict[str, Any] = data.get("fields") or {}
        status = fields.get("status") or {}
        category = status.get("statusCategory") or {}

        return cls(
            key=data.get("key", ""),
            summary=fields.get("summary") or "",
            description=fields.get("description") or "",
            status=status.get("name") or "",
            status_category=category.get("name") or "",
            reporter=_display_name(fields.get("reporter")),
            assignee=_display_name(fields.get("assignee")),
        )


@dataclass(frozen=True)
class SearchResult:
    """
    One page of a JQL search.

    Attributes:
        total: Number of issues matching the query on the server
        issues: The returned issues, at most the requested page size
    """
    total: int
    issues: list[Issue] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        """True when the server has more matches than were returned."""
        return self.total > len(self.issues)
