"""
Response Formatting
===================

Turns JIRA data into Slack messages.

A command produces either a plain string or a `Response`: summary text plus
an ordered list of `Attachment` blocks. Each attachment renders as a colored
sidebar with a linked title, body text and a row of short fields:

    ┃ ABC-123: Login button does nothing        (title, linked)
    ┃ Clicking login on Safari has no effect.   (text)
    ┃ Reporter      Assignee       Status       (short fields)
    ┃ Jane Doe      _Unassigned_   In Review

Nothing here talks to Slack or JIRA; it only shapes data.
"""

from dataclasses import dataclass, field

from jirabot.jira.models import Issue, SearchResult

# Sidebar colors
GREEN = "#14892c"
BLUE = "#4a6785"
YELLOW = "#f6c342"
GRAY = "#cccccc"
ISSUE_COLOR = "#37465D"

STATUS_COLORS = {
    "Done": GREEN,
    "Resolved": GREEN,
    "Reopened": GREEN,
    "To Do": BLUE,
    "Ready for Dev": BLUE,
    "To Discuss": BLUE,
    "Backlog": BLUE,
    "In Progress": YELLOW,
    "In Review": YELLOW,
    "Code Review": YELLOW,
    "Testing": YELLOW,
    "Ready for Review": YELLOW,
}

NO_RECORDS_MESSAGE = "No records found."
UNKNOWN_REPORTER = "_Unknown_"
UNASSIGNED = "_Unassigned_"


@dataclass
class Field:
    """A label/value pair shown under an attachment; short fields sit side by side."""
    title: str
    value: str
    short: bool = True

    def to_dict(self) -> dict:
        return {"title": self.title, "value": self.value, "short": self.short}


@dataclass
class Attachment:
    """
    A Slack message attachment.

    Attributes:
        fallback: Plain text for notifications and clients without attachments
        title: Bold heading
        title_link: URL the heading links to
        color: Hex sidebar color
        text: Body text
        fields: Ordered label/value pairs
    """
    fallback: str
    title: str = ""
    title_link: str = ""
    color: str = GRAY
    text: str = ""
    fields: list[Field] = field(default_factory=list)

    def add_field(self, title: str, value: str, short: bool = True) -> "Attachment":
        self.fields.append(Field(title, value, short))
        return self

    def to_dict(self) -> dict:
        """Convert to the attachment shape accepted by chat.postMessage."""
        data = {
            "fallback": self.fallback,
            "color": self.color,
            "title": self.title,
            "title_link": self.title_link,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.text:
            data["text"] = self.text
        return data


@dataclass
class Response:
    """
    A complete reply: summary text and any attachments.

    Example:
        response = Response("Found 2 issues.")
        response.attachments.append(issue_attachment(issue, url))
        await client.chat_postMessage(channel=channel, **response.to_message())
    """
    text: str
    attachments: list[Attachment] = field(default_factory=list)

    def to_message(self) -> dict:
        """Keyword arguments for chat.postMessage."""
        message: dict = {"text": self.text}
        if self.attachments:
            message["attachments"] = [a.to_dict() for a in self.attachments]
        return message


def as_response(result: "str | Response") -> Response:
    """Wrap a plain-string command result so everything is sent the same way."""
    if isinstance(result, Response):
        return result
    return Response(text=result)


def status_color(status_category: str) -> str:
    """Pick the sidebar color for an issue's status category; unlisted categories are gray."""
    return STATUS_COLORS.get(status_category, GRAY)


def _people_fields(attachment: Attachment, issue: Issue) -> Attachment:
    return (
        attachment
        .add_field("Reporter", issue.reporter or UNKNOWN_REPORTER)
        .add_field("Assignee", issue.assignee or UNASSIGNED)
        .add_field("Status", issue.status)
    )


def issue_attachment(issue: Issue, url: str) -> Attachment:
    """The card shown when someone mentions a ticket key in conversation."""
    attachment = Attachment(
        fallback=f'{issue.key}: "{issue.summary}" ({issue.status}).',
        title=f"{issue.key}: {issue.summary}",
        title_link=url,
        color=ISSUE_COLOR,
    )
    return _people_fields(attachment, issue)


def search_attachment(issue: Issue, url: str) -> Attachment:
    """One search hit, colored by its status."""
    attachment = Attachment(
        fallback=f"{issue.key}: {issue.summary}",
        title=issue.summary,
        title_link=url,
        color=status_color(issue.status_category),
        text=issue.description,
    )
    return _people_fields(attachment, issue)


def search_response(
    result: SearchResult,
    search_url: str,
    issue_urls: dict[str, str]
) -> "str | Response":
    """
    Format a JQL search.

    Args:
        result: The search page
        search_url: Link to the full result list in JIRA
        issue_urls: Browse URL for each returned issue key

    Returns:
        NO_RECORDS_MESSAGE when nothing matched, otherwise a Response with a
        summary line and one attachment per returned issue
    """
    if result.total == 0 or not result.issues:
        return NO_RECORDS_MESSAGE

    noun = "issue" if result.total == 1 else "issues"
    text = f"Found {result.total} {noun}."
    if result.truncated:
        text += f" I will only display the first {len(result.issues)}."
    text += f" <{search_url}|View in JIRA>"

    return Response(
        text=text,
        attachments=[search_attachment(i, issue_urls[i.key]) for i in result.issues],
    )
