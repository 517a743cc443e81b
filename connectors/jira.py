"""
JIRA connector for user identities, projects and issue activity
"""
import asyncio
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import httpx
import requests
from jira import JIRA, JIRAError

from config import settings
from core.exceptions import IdentityResolutionError, UpstreamTransportError
from utils.logging import get_logger, log_upstream_call

logger = get_logger(__name__)

ISSUE_ACTIVITY_FIELDS = "summary,assignee,status,project,worklog"


class JiraConnector:
    """Read-only JIRA client

    Library-backed calls are blocking and run in worker threads. The raw
    REST listing the library does not wrap goes through httpx.
    """

    source = "jira"

    def __init__(self, client: Optional[JIRA] = None, http_client: Optional[httpx.AsyncClient] = None,
                 server: Optional[str] = None, username: Optional[str] = None,
                 api_token: Optional[str] = None, lookup_concurrency: Optional[int] = None):
        self.server = (server if server is not None else settings.atlassian.jira_url).rstrip("/")
        self._basic_auth = (
            username if username is not None else settings.atlassian.jira_username,
            api_token if api_token is not None else settings.atlassian.jira_api_token,
        )
        self.client = client
        self._client_lock = threading.Lock()
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.analysis.http_timeout_seconds,
            auth=self._basic_auth,
            headers={"Accept": "application/json"}
        )
        self.lookup_concurrency = lookup_concurrency or settings.analysis.jira_user_lookup_concurrency

    def _get_client(self) -> JIRA:
        # Called from worker threads; one client per connector, no retries
        with self._client_lock:
            if self.client is None:
                self.client = JIRA(server=self.server, basic_auth=self._basic_auth,
                                   max_retries=0, timeout=settings.analysis.http_timeout_seconds)
            return self.client

    async def _call(self, endpoint: str, method: str, *args, **kwargs) -> Any:
        """Run a jira library method off the event loop"""
        def invoke():
            return getattr(self._get_client(), method)(*args, **kwargs)

        try:
            return await asyncio.to_thread(invoke)
        except JIRAError as e:
            logger.error("JIRA request failed", endpoint=endpoint,
                         status=e.status_code, error=e.text)
            raise UpstreamTransportError(self.source, endpoint, e.status_code, e.text or "") from e
        except requests.RequestException as e:
            logger.error("JIRA request failed", endpoint=endpoint, error=str(e))
            raise UpstreamTransportError(self.source, endpoint, detail=str(e)) from e

    async def _get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self.http_client.get(f"{self.server}/rest/api/2{endpoint}", params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("JIRA request failed", endpoint=endpoint,
                         status=e.response.status_code, error=e.response.text)
            raise UpstreamTransportError(self.source, endpoint, e.response.status_code,
                                         e.response.text) from e
        except (httpx.RequestError, ValueError) as e:
            logger.error("JIRA request failed", endpoint=endpoint, error=str(e))
            raise UpstreamTransportError(self.source, endpoint, detail=str(e)) from e

    async def connect(self) -> bool:
        """Establish connection to JIRA"""
        try:
            await self.get_current_user()
            logger.info("JIRA connection established successfully")
            return True
        except UpstreamTransportError:
            return False

    async def get_current_user(self) -> Dict[str, Any]:
        return await self._call("/myself", "myself")

    async def get_user_by_account_id(self, account_id: str) -> Dict[str, Any]:
        """Get user details by account ID"""
        user = await self._call("/user", "user", account_id)
        return user.raw

    async def _lookup_user(self, account_id: str, semaphore: asyncio.Semaphore) -> Dict[str, Any]:
        async with semaphore:
            try:
                return await self.get_user_by_account_id(account_id)
            except UpstreamTransportError as e:
                raise IdentityResolutionError(account_id, e) from e

    async def _resolve_user(self, account_id: str, semaphore: asyncio.Semaphore) -> Optional[Dict[str, Any]]:
        try:
            return await self._lookup_user(account_id, semaphore)
        except IdentityResolutionError as e:
            logger.warning("Could not fetch user", account_id=account_id, error=str(e.cause))
            return None

    async def get_users_with_details(self, account_ids: Iterable[str]) -> List[Optional[Dict[str, Any]]]:
        """Resolve each account id independently

        The result lines up with `account_ids`; ids that fail to resolve
        come back as None. With no ids the full user listing is returned.
        """
        account_ids = list(account_ids)
        if not account_ids:
            return await self.get_all_users()

        semaphore = asyncio.Semaphore(self.lookup_concurrency)
        users = await asyncio.gather(
            *(self._resolve_user(account_id, semaphore) for account_id in account_ids)
        )
        resolved = sum(1 for user in users if user is not None)
        logger.info("Resolved JIRA users", requested=len(account_ids), resolved=resolved)
        return list(users)

    async def get_all_users(self, max_results: int = 100) -> List[Dict[str, Any]]:
        users = await self._get_json("/users/search", params={
            "maxResults": max_results,
            "includeInactive": "false"
        })
        log_upstream_call(self.source, "/users/search", len(users))
        return users

    async def search_users(self, query: str = "", max_results: int = 50) -> List[Dict[str, Any]]:
        if not query:
            return await self.get_all_users(max_results)
        users = await self._call("/user/search", "search_users", query=query,
                                 maxResults=max_results, includeInactive=False)
        log_upstream_call(self.source, "/user/search", len(users), query=query)
        return [user.raw for user in users]

    async def get_projects(self) -> List[Dict[str, Any]]:
        """Fetch all JIRA projects"""
        projects = await self._call("/project", "projects")
        log_upstream_call(self.source, "/project", len(projects))
        return [project.raw for project in projects]

    async def search_issues(self, jql: str, max_results: int = 50) -> Dict[str, Any]:
        return await self._call("/search", "search_issues", jql, maxResults=max_results,
                                fields=ISSUE_ACTIVITY_FIELDS, json_result=True)

    async def get_issue_worklogs(self, issue_key: str) -> List[Dict[str, Any]]:
        worklogs = await self._call(f"/issue/{issue_key}/worklog", "worklogs", issue_key)
        return [worklog.raw for worklog in worklogs]

    async def get_team_activity(self, project_keys: Optional[List[str]] = None,
                                days: int = 30) -> Dict[str, Any]:
        """Issues with work logged in the last `days` days"""
        since = (datetime.now(timezone.utc).date() - timedelta(days=days)).isoformat()
        jql = f'worklogDate >= "{since}"'
        if project_keys:
            quoted = ",".join(f'"{key}"' for key in project_keys)
            jql += f" AND project IN ({quoted})"

        logger.info("Getting team activity", days=days, projects=project_keys or "all")
        return await self.search_issues(jql, max_results=100)

    async def close(self):
        """Close the connector and clean up resources"""
        if self.http_client:
            await self.http_client.aclose()
        if self.client is not None:
            self.client.close()
        self.client = None
