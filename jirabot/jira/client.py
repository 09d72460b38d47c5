"""
JIRA Client
===========

A thin async wrapper over the JIRA REST API (v2) covering exactly what the
bot needs:

- list projects                (cached for 1 hour)
- find a user by email/query   (cached for 1 day)
- create an issue, set its reporter, comment on it
- fetch an issue by key
- run a JQL search

JIRA API Notes:
- Uses httpx for async HTTP requests with basic auth
- Every failure is translated into the errors in jirabot.jira.errors;
  httpx exceptions never leak out of this module
- No retries: a failed call fails the one command that made it
"""

from urllib.parse import quote

import httpx

from jirabot.jira.errors import (
    CreationError,
    NotFoundError,
    QueryError,
    RemoteError,
)
from jirabot.jira.models import Issue, Project, SearchResult, User
from jirabot.memory import ExpiringCache
from jirabot.utils.config import JiraConfig
from jirabot.utils.logger import Logger

logger = Logger("JiraClient")

PROJECTS_CACHE_KEY = "projects"
PROJECTS_TTL_MS = 3_600_000     # 1 hour
USER_TTL_MS = 86_400_000        # 1 day

# Issue type id 3 is "Task" on a stock JIRA install.
TASK_ISSUE_TYPE_ID = "3"
CREATED_LABEL = "slack-created"

SEARCH_FIELDS = ["summary", "status", "assignee", "reporter", "description"]

CREATE_FAILED_MESSAGE = "Unable to create ticket - did you specify a valid project key?"


def _error_text(response: httpx.Response) -> str:
    """Pull JIRA's own error messages out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    messages = list(body.get("errorMessages") or [])
    messages.extend(f"{k}: {v}" for k, v in (body.get("errors") or {}).items())
    return "; ".join(messages) or response.reason_phrase


class JiraClient:
    """
    Async JIRA REST client with a lookup cache.

    Example:
        client = JiraClient(config.jira, ExpiringCache())

        projects = await client.list_projects()
        issue = await client.find_issue("ABC-123")
        print(client.browse_url(issue.key))

        await client.aclose()

    Args:
        config: JIRA connection settings
        cache: Cache for project and user lookups
        transport: Optional httpx transport, used by tests to stub the server
    """

    def __init__(
        self,
        config: JiraConfig,
        cache: ExpiringCache,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self.host = config.host
        self.port = config.port
        self.cache = cache

        self._http = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/api/2",
            auth=(config.username, config.password),
            headers={"Accept": "application/json"},
            timeout=config.timeout_seconds,
            transport=transport,
        )

    # ----- Links -----

    @property
    def base_url(self) -> str:
        """https://host, with the port only when it is not 443."""
        if self.port and self.port != 443:
            return f"https://{self.host}:{self.port}"
        return f"https://{self.host}"

    def browse_url(self, issue_key: str) -> str:
        return f"{self.base_url}/browse/{issue_key}"

    def search_url(self, jql: str) -> str:
        return f"{self.base_url}/issues/?jql={quote(jql, safe='')}"

    # ----- HTTP -----

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None
    ) -> dict | list | None:
        """
        Make an authenticated request and return the decoded JSON body.

        Raises:
            NotFoundError: On HTTP 404
            RemoteError: On any other HTTP error or transport failure
        """
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"JIRA request failed: {method} {path}", e)
            raise RemoteError(f"Could not reach JIRA at {self.host}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(_error_text(response), status_code=404)
        if response.status_code >= 400:
            text = _error_text(response)
            logger.error(f"JIRA API error: {response.status_code} - {text}")
            raise RemoteError(f"JIRA returned {response.status_code}: {text}", response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"JIRA returned an unreadable response for {path}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # ----- Projects -----

    async def list_projects(self) -> list[Project]:
        """
        Get every project visible to the bot user.

        Served from the cache for an hour after each successful fetch.
        """
        cached = self.cache.get(PROJECTS_CACHE_KEY)
        if cached is not None:
            return cached

        data = await self._request("GET", "/project")
        projects = [Project.from_api(p) for p in data or []]

        self.cache.put(PROJECTS_CACHE_KEY, projects, PROJECTS_TTL_MS)
        logger.debug(f"Fetched {len(projects)} projects")
        return projects

    # ----- Users -----

    async def find_user(self, query: str) -> User | None:
        """
        Find the first user matching `query` (usually an email address).

        Returns:
            The user, or None when nobody matches. Misses are not cached.
        """
        cache_key = f"user|{query}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._request(
            "GET",
            "/user/search",
            params={
                "username": query,
                "startAt": 0,
                "maxResults": 1,
                "includeActive": "true",
                "includeInactive": "true",
            },
        )
        if not data:
            logger.debug(f"No JIRA user matches {query}")
            return None

        user = User.from_api(data[0])
        self.cache.put(cache_key, user, USER_TTL_MS)
        return user

    # ----- Issues -----

    async def create_issue(self, project_key: str, summary: str, description: str) -> Issue:
        """
        Create a Task labelled `slack-created`.

        Raises:
            CreationError: If JIRA rejects the project key or payload
        """
        payload = {
            "fields": {
                "project": {"key": project_key},
                "summary": summary,
                "description": description,
                "issuetype": {"id": TASK_ISSUE_TYPE_ID},
                "labels": [CREATED_LABEL],
            }
        }
        try:
            data = await self._request("POST", "/issue", json=payload)
        except RemoteError as e:
            logger.warning(f"Create rejected for project {project_key}: {e}")
            raise CreationError(CREATE_FAILED_MESSAGE) from e

        if not data or not data.get("key"):
            raise CreationError(CREATE_FAILED_MESSAGE)

        logger.info(f"Created {data['key']}")
        return Issue(key=data["key"], summary=summary, description=description)

    async def set_reporter(self, issue_key: str, user_login: str) -> None:
        await self._request(
            "PUT",
            f"/issue/{quote(issue_key)}",
            json={"fields": {"reporter": {"name": user_login}}},
        )

    async def add_comment(self, issue_key: str, text: str) -> None:
        await self._request("POST", f"/issue/{quote(issue_key)}/comment", json={"body": text})

    async def find_issue(self, issue_key: str) -> Issue:
        """
        Fetch a single issue.

        Raises:
            NotFoundError: If the key does not exist (or is not visible)
            RemoteError: On any other failure
        """
        try:
            data = await self._request("GET", f"/issue/{quote(issue_key)}")
        except NotFoundError as e:
            raise NotFoundError(f"Issue {issue_key} does not exist.", status_code=404) from e

        return Issue.from_api(data or {})

    async def search(self, jql: str, max_results: int = 5) -> SearchResult:
        """
        Run a JQL query and return the first page of results.

        Zero matches is a normal, empty result.

        Raises:
            QueryError: If the JQL is invalid or the call fails
        """
        payload = {
            "jql": jql,
            "startAt": 0,
            "maxResults": max_results,
            "fields": SEARCH_FIELDS,
        }
        try:
            data = await self._request("POST", "/search", json=payload)
        except RemoteError as e:
            raise QueryError(f"Query failed: {e.message}") from e

        data = data or {}
        issues = [Issue.from_api(i) for i in data.get("issues") or []][:max_results]
        return SearchResult(total=int(data.get("total") or 0), issues=issues)
