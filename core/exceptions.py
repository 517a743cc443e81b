"""
Error taxonomy for the team analytics service
"""
from typing import Optional


class BillabotError(Exception):
    """Base class for all service errors"""


class UpstreamTransportError(BillabotError):
    """A Tempo or JIRA call failed at the transport or HTTP level"""

    def __init__(self, source: str, endpoint: str, status_code: Optional[int] = None, detail: str = ""):
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        self.detail = detail
        status = f"HTTP {status_code}" if status_code is not None else "transport error"
        super().__init__(f"{source} {endpoint} failed ({status}): {detail}".rstrip(": "))


class IdentityResolutionError(BillabotError):
    """A single JIRA user could not be resolved"""

    def __init__(self, account_id: str, cause: Exception):
        self.account_id = account_id
        self.cause = cause
        super().__init__(f"Could not resolve user {account_id}: {cause}")


class ValidationError(BillabotError):
    """Caller supplied invalid input"""
