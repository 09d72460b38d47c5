import pytest

from jirabot.formatting import (
    BLUE,
    GRAY,
    GREEN,
    ISSUE_COLOR,
    NO_RECORDS_MESSAGE,
    YELLOW,
    Attachment,
    Response,
    as_response,
    issue_attachment,
    search_response,
    status_color,
)
from jirabot.jira.models import Issue, SearchResult


@pytest.mark.parametrize(
    "category,expected",
    [
        ("Done", GREEN),
        ("Resolved", GREEN),
        ("Reopened", GREEN),
        ("To Do", BLUE),
        ("Ready for Dev", BLUE),
        ("To Discuss", BLUE),
        ("Backlog", BLUE),
        ("In Progress", YELLOW),
        ("In Review", YELLOW),
        ("Code Review", YELLOW),
        ("Testing", YELLOW),
        ("Ready for Review", YELLOW),
        ("Blocked", GRAY),
        ("", GRAY),
    ],
)
def test_status_color(category, expected):
    assert status_color(category) == expected


def test_unlisted_category_is_gray_even_with_listed_status_name():
    issue = Issue(key="ABC-7", summary="Stuck", status="Testing", status_category="Blocked")

    response = search_response(SearchResult(total=1, issues=[issue]), "https://x", {"ABC-7": "https://y"})

    assert status_color("Blocked") == GRAY
    assert response.attachments[0].color == GRAY


def test_issue_attachment_shape():
    issue = Issue(key="ABC-123", summary="Login broken", status="Open", reporter="Jane Doe")

    attachment = issue_attachment(issue, "https://jira.example.com/browse/ABC-123")

    assert attachment.fallback == 'ABC-123: "Login broken" (Open).'
    assert attachment.title == "ABC-123: Login broken"
    assert attachment.title_link == "https://jira.example.com/browse/ABC-123"
    assert attachment.color == ISSUE_COLOR
    assert [(f.title, f.value, f.short) for f in attachment.fields] == [
        ("Reporter", "Jane Doe", True),
        ("Assignee", "_Unassigned_", True),
        ("Status", "Open", True),
    ]


def test_search_response_no_records():
    assert search_response(SearchResult(total=0), "https://x", {}) == NO_RECORDS_MESSAGE


def test_search_response_truncated_notice():
    issues = [
        Issue(key=f"ABC-{n}", summary=f"Issue {n}", description="d", status="Backlog", status_category="To Do")
        for n in range(1, 6)
    ]
    urls = {i.key: f"https://jira.example.com/browse/{i.key}" for i in issues}

    response = search_response(SearchResult(total=7, issues=issues), "https://jira.example.com/issues/?jql=x", urls)

    assert isinstance(response, Response)
    assert "Found 7 issues." in response.text
    assert "only display the first 5" in response.text
    assert "<https://jira.example.com/issues/?jql=x|View in JIRA>" in response.text
    assert len(response.attachments) == 5

    first = response.attachments[0]
    assert first.title == "Issue 1"
    assert first.text == "d"
    assert first.color == BLUE
    assert first.title_link == "https://jira.example.com/browse/ABC-1"
    assert [f.value for f in first.fields] == ["_Unknown_", "_Unassigned_", "Backlog"]


def test_search_response_without_truncation():
    issue = Issue(key="ABC-1", summary="Only one", status="Done", status_category="Done", assignee="Bob")

    response = search_response(SearchResult(total=1, issues=[issue]), "https://x", {"ABC-1": "https://y"})

    assert response.text.startswith("Found 1 issue.")
    assert "only display" not in response.text
    assert response.attachments[0].color == GREEN
    assert response.attachments[0].fields[1].value == "Bob"


def test_response_to_message():
    attachment = Attachment(fallback="fb", title="t", title_link="https://l", color=GRAY).add_field("Status", "Open")

    message = Response("hello", [attachment]).to_message()

    assert message == {
        "text": "hello",
        "attachments": [{
            "fallback": "fb",
            "color": GRAY,
            "title": "t",
            "title_link": "https://l",
            "fields": [{"title": "Status", "value": "Open", "short": True}],
        }],
    }


def test_as_response_wraps_plain_text():
    assert as_response("hi").to_message() == {"text": "hi"}
