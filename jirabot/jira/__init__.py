"""
JIRA Integration
================

Everything the bot knows about JIRA:
- JiraClient: async REST client (projects, users, issues, JQL search)
- Project, User, Issue, SearchResult: the data it returns
- JiraError and subclasses: the failures it raises
"""

from jirabot.jira.client import JiraClient
from jirabot.jira.errors import (
    CommandError,
    CreationError,
    JiraError,
    NotFoundError,
    QueryError,
    RemoteError,
)
from jirabot.jira.models import Issue, Project, SearchResult, User

__all__ = [
    "JiraClient",
    "JiraError",
    "RemoteError",
    "NotFoundError",
    "CreationError",
    "QueryError",
    "CommandError",
    "Issue",
    "Project",
    "SearchResult",
    "User",
]
