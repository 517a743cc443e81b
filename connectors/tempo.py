"""
Tempo connector for planning (availability) and worklog (billability) data
"""
from typing import Any, Dict, List, Optional
import httpx

from config import settings
from core.exceptions import UpstreamTransportError
from models.tempo import LoggedRecord, PlannedRecord, TimeWindow
from utils.logging import get_logger, log_upstream_call

logger = get_logger(__name__)


class TempoConnector:
    """Read-only Tempo REST client

    Every fetch is a single request bounded by `limit`; results beyond the
    first page are not followed.
    """

    source = "tempo"

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None,
                 base_url: Optional[str] = None, api_token: Optional[str] = None):
        self.base_url = (base_url or settings.atlassian.tempo_base_url).rstrip("/")
        token = api_token if api_token is not None else settings.atlassian.tempo_api_token
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.analysis.http_timeout_seconds,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json"
            }
        )

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self.http_client.get(f"{self.base_url}{endpoint}", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Tempo request failed", endpoint=endpoint,
                         status=e.response.status_code, error=e.response.text)
            raise UpstreamTransportError(self.source, endpoint, e.response.status_code,
                                         e.response.text) from e
        except httpx.RequestError as e:
            logger.error("Tempo request failed", endpoint=endpoint, error=str(e))
            raise UpstreamTransportError(self.source, endpoint, detail=str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("Tempo returned a non-JSON body", endpoint=endpoint)
            raise UpstreamTransportError(self.source, endpoint, response.status_code,
                                         "invalid JSON body") from e

    async def connect(self) -> bool:
        """Test connection to Tempo API"""
        try:
            await self._get("/worklogs", params={"limit": 1})
            logger.info("Tempo connection established successfully")
            return True
        except UpstreamTransportError:
            return False

    async def get_availability(self, from_date: str, to_date: str,
                               limit: Optional[int] = None) -> Dict[str, Any]:
        """Raw Tempo Planner allocations for a date range"""
        logger.info("Getting availability", from_date=from_date, to_date=to_date)
        return await self._get("/plans", self._range_params(from_date, to_date, limit))

    async def get_billability(self, from_date: str, to_date: str,
                              limit: Optional[int] = None) -> Dict[str, Any]:
        """Raw Tempo worklogs for a date range"""
        logger.info("Getting billability", from_date=from_date, to_date=to_date)
        return await self._get("/worklogs", self._range_params(from_date, to_date, limit))

    async def get_user(self, account_id: str) -> Dict[str, Any]:
        """Raw Tempo user record"""
        return await self._get(f"/users/{account_id}")

    async def fetch_planned(self, window: TimeWindow, limit: Optional[int] = None) -> List[PlannedRecord]:
        """Planner allocations in the window, one record per plan"""
        data = await self.get_availability(window.params["from"], window.params["to"], limit)
        results = self._results(data, "/plans")

        records = []
        for plan in results:
            record = PlannedRecord.from_api(plan)
            if record is None:
                logger.warning("Skipping plan without assignee", plan_id=plan.get("id"))
                continue
            records.append(record)

        log_upstream_call(self.source, "/plans", len(records), **window.params)
        return records

    async def fetch_logged(self, window: TimeWindow, limit: Optional[int] = None) -> List[LoggedRecord]:
        """Worklogs in the window, one record per worklog"""
        data = await self.get_billability(window.params["from"], window.params["to"], limit)
        results = self._results(data, "/worklogs")

        records = []
        for worklog in results:
            record = LoggedRecord.from_api(worklog)
            if record is None:
                logger.warning("Skipping worklog without author",
                               worklog_id=worklog.get("tempoWorklogId"))
                continue
            records.append(record)

        log_upstream_call(self.source, "/worklogs", len(records), **window.params)
        return records

    def _range_params(self, from_date: str, to_date: str, limit: Optional[int]) -> Dict[str, Any]:
        return {
            "from": from_date,
            "to": to_date,
            "limit": limit or settings.analysis.tempo_page_limit
        }

    def _results(self, data: Dict[str, Any], endpoint: str) -> List[Dict[str, Any]]:
        if (data.get("metadata") or {}).get("next"):
            logger.warning("Tempo returned a partial result set; later pages are not fetched",
                           endpoint=endpoint, count=len(data.get("results", [])))
        return data.get("results", [])

    async def close(self):
        """Close the connector and clean up resources"""
        if self.http_client:
            await self.http_client.aclose()
