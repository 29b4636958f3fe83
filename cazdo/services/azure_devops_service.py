"""Azure DevOps API integration service"""
from typing import Optional, TYPE_CHECKING

import httpx

from cazdo.constants import API_VERSION
from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.models.work_item import WorkItemDetails
from cazdo.logging_config import get_logger

if TYPE_CHECKING:
    from cazdo.config import Config

logger = get_logger(__name__)


class AzureDevOpsService:
    """Fetches work items from the Azure DevOps REST API.

    Works for cloud organizations (``https://dev.azure.com/{org}``) and
    on-premises collections (``https://server/tfs/{collection}``).
    """

    def __init__(
        self,
        organization_url: str,
        pat: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the service.

        Args:
            organization_url: Organization or collection URL
            pat: Personal access token with Work Items (Read) scope
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = organization_url.rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            auth=httpx.BasicAuth("", pat),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: "Config") -> "AzureDevOpsService":
        """Create the service from a loaded configuration."""
        return cls(config.organization_url, config.resolve_pat(), timeout=config.request_timeout)

    def _get_json(self, path: str, work_item_id: Optional[int] = None, **params) -> dict:
        params["api-version"] = API_VERSION
        try:
            response = self.client.get(path, params=params)
        except httpx.TransportError as e:
            logger.debug(f"[AzureDevOps] Transport error for {path}: {e}")
            raise ProviderError(ProviderErrorKind.NETWORK, str(e), work_item_id) from e

        if response.status_code in (401, 403):
            raise ProviderError(
                ProviderErrorKind.UNAUTHORIZED,
                f"HTTP {response.status_code}: check that the PAT is valid and has Work Items (Read) scope",
                work_item_id,
            )
        if response.status_code == 404:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, "HTTP 404", work_item_id)
        if response.is_error:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN,
                f"HTTP {response.status_code}: {response.text[:200]}",
                work_item_id,
            )
        # Azure DevOps answers bad credentials with a 203 sign-in page
        if "json" not in response.headers.get("content-type", ""):
            raise ProviderError(
                ProviderErrorKind.UNAUTHORIZED,
                "Received a non-JSON response (sign-in page); the PAT was rejected",
                work_item_id,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                ProviderErrorKind.UNKNOWN, f"Invalid JSON in response: {e}", work_item_id
            ) from e

    def fetch(self, work_item_id: int) -> WorkItemDetails:
        """Fetch a single work item.

        Raises:
            ProviderError: on network, authorization, lookup or parse failure
        """
        logger.debug(f"[AzureDevOps] Fetching work item #{work_item_id}")
        payload = self._get_json(f"/_apis/wit/workitems/{work_item_id}", work_item_id)
        details = WorkItemDetails.from_json(payload, work_item_id)
        logger.debug(f"[AzureDevOps] Work item #{work_item_id}: {details.type_name} '{details.title}'")
        return details

    def verify(self) -> int:
        """Check that the organization URL and PAT work.

        Returns:
            Number of projects visible to the token
        """
        payload = self._get_json("/_apis/projects", **{"$top": 100})
        count = payload.get("count", len(payload.get("value", [])))
        logger.debug(f"[AzureDevOps] Verified access, {count} project(s) visible")
        return count

    def close(self) -> None:
        self.client.close()
