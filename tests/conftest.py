# tests/conftest.py
import threading
import time
from typing import Any, Dict, Iterable, List, Optional

import httpx
import pytest
from jira import JIRAError

from connectors.jira import JiraConnector
from connectors.tempo import TempoConnector
from services.team_analysis import TeamAnalysisService

TEMPO_BASE = "https://tempo.test/4"
JIRA_BASE = "https://jira.test"


def plan(user_id: Optional[str], seconds: int) -> Dict[str, Any]:
    """Tempo Planner allocation in the v4 wire shape."""
    assignee = {"id": user_id, "type": "USER"} if user_id else None
    return {"id": 1, "assignee": assignee, "totalPlannedSecondsInScope": seconds}


def worklog(user_id: Optional[str], spent: int, billable: int) -> Dict[str, Any]:
    """Tempo worklog in the v4 wire shape."""
    author = {"accountId": user_id} if user_id else None
    return {
        "tempoWorklogId": 100,
        "author": author,
        "timeSpentSeconds": spent,
        "billableSeconds": billable,
    }


def jira_user(account_id: str, name: str, active: Optional[bool] = True) -> Dict[str, Any]:
    user = {
        "accountId": account_id,
        "displayName": name,
        "emailAddress": f"{name.split()[0].lower()}@example.com",
        "timeZone": "Europe/London",
    }
    if active is not None:
        user["active"] = active
    return user


class FakeResource:
    def __init__(self, raw: Dict[str, Any]):
        self.raw = raw


class FakeJiraClient:
    """
    Stand-in for jira.JIRA.

    Only the methods the connector calls are implemented; unknown users
    raise JIRAError like the real client does on a 404.
    """

    def __init__(self, users: Optional[Dict[str, Dict[str, Any]]] = None,
                 failing: Iterable[str] = (), delay: float = 0.0):
        self.users = users or {}
        self.failing = set(failing)
        self.delay = delay
        self.lookups: List[str] = []
        self.last_jql: Optional[str] = None
        self.active_calls = 0
        self.max_active_calls = 0
        self._lock = threading.Lock()

    def user(self, account_id: str) -> FakeResource:
        with self._lock:
            self.lookups.append(account_id)
            self.active_calls += 1
            self.max_active_calls = max(self.max_active_calls, self.active_calls)
        try:
            if self.delay:
                time.sleep(self.delay)
            if account_id in self.failing or account_id not in self.users:
                raise JIRAError(text="User does not exist", status_code=404)
            return FakeResource(self.users[account_id])
        finally:
            with self._lock:
                self.active_calls -= 1

    def myself(self) -> Dict[str, Any]:
        return {"accountId": "me", "displayName": "API User"}

    def search_users(self, query: str, maxResults: int, includeInactive: bool) -> List[FakeResource]:
        return [FakeResource(u) for u in self.users.values()
                if query.lower() in u["displayName"].lower()][:maxResults]

    def projects(self) -> List[FakeResource]:
        return [FakeResource({"key": "PIH", "name": "PIH Platform"})]

    def search_issues(self, jql: str, maxResults: int, fields: str, json_result: bool) -> Dict[str, Any]:
        self.last_jql = jql
        return {"issues": [], "total": 0, "maxResults": maxResults}

    def worklogs(self, issue_key: str) -> List[FakeResource]:
        return [FakeResource({"id": "1", "issueId": issue_key, "timeSpentSeconds": 3600})]

    def close(self) -> None:
        return None


def tempo_transport(plans: List[Dict[str, Any]], worklogs: List[Dict[str, Any]],
                    fail: Optional[str] = None, requests: Optional[List[httpx.Request]] = None,
                    has_more: bool = False) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        path = request.url.path
        if fail and path.endswith(fail):
            return httpx.Response(500, text="Tempo is down")
        metadata: Dict[str, Any] = {}
        if has_more:
            metadata["next"] = f"{TEMPO_BASE}{path}?offset=1"
        if path.endswith("/plans"):
            return httpx.Response(200, json={"results": plans, "metadata": metadata})
        if path.endswith("/worklogs"):
            return httpx.Response(200, json={"results": worklogs, "metadata": metadata})
        return httpx.Response(404, json={"errors": [{"message": "not found"}]})

    return httpx.MockTransport(handler)


def jira_transport(listing: List[Dict[str, Any]], status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/rest/api/2/users/search"):
            return httpx.Response(status_code, json=listing)
        return httpx.Response(404, json={})

    return httpx.MockTransport(handler)


def make_tempo(plans=(), worklogs=(), fail=None, requests=None, has_more=False) -> TempoConnector:
    transport = tempo_transport(list(plans), list(worklogs), fail=fail, requests=requests, has_more=has_more)
    return TempoConnector(
        http_client=httpx.AsyncClient(transport=transport),
        base_url=TEMPO_BASE,
        api_token="tempo-token",
    )


def make_jira(client: Optional[FakeJiraClient] = None, listing=(), listing_status: int = 200,
              lookup_concurrency: int = 10) -> JiraConnector:
    return JiraConnector(
        client=client or FakeJiraClient(),
        http_client=httpx.AsyncClient(transport=jira_transport(list(listing), listing_status)),
        server=JIRA_BASE,
        username="bot@example.com",
        api_token="jira-token",
        lookup_concurrency=lookup_concurrency,
    )


def make_service(plans=(), worklogs=(), users=None, failing=(), listing=(), fail=None) -> TeamAnalysisService:
    return TeamAnalysisService(
        make_tempo(plans, worklogs, fail=fail),
        make_jira(FakeJiraClient(users=users, failing=failing), listing=listing),
    )


@pytest.fixture
def team_records():
    """
    Three users:
    - alice: planned 40h, logged 20h of which 18h billable
    - bob: planned 20h, logged nothing
    - carol: not planned, logged 10h of which 1h billable
    """
    plans = [plan("alice", 20 * 3600), plan("alice", 20 * 3600), plan("bob", 20 * 3600)]
    worklogs = [
        worklog("alice", 12 * 3600, 12 * 3600),
        worklog("alice", 8 * 3600, 6 * 3600),
        worklog("carol", 10 * 3600, 3600),
    ]
    users = {
        "alice": jira_user("alice", "Alice Smith"),
        "bob": jira_user("bob", "Bob Jones"),
        "carol": jira_user("carol", "Carol White"),
    }
    return plans, worklogs, users
