"""
Shopify Admin REST API client.

Fetches orders and products for one store. Orders fall back through older
API versions when the configured one answers 404. The client never raises
to its caller: every failure resolves to an empty collection, so an empty
list means "unknown / unavailable" as much as "no records".
fetch_*_result() exposes the difference for callers that care.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from app.core.config import settings
from app.core.exceptions import (
    ExternalServiceError,
    UpstreamUnavailableError,
    UpstreamVersionMismatchError,
)
from app.core.logging import get_logger, perf_logger

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """Records returned by Shopify plus whether the call actually failed."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    failed: bool = False
    api_version: Optional[str] = None


class ShopifyService:
    """Authenticated client for a single Shopify store."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: Optional[str] = None,
        fallback_versions: Optional[Sequence[str]] = None,
        oldest_api_version: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.shop_domain = shop_domain
        self.access_token = access_token
        self.api_version = api_version or settings.shopify_api_version
        self.fallback_versions = (
            list(fallback_versions)
            if fallback_versions is not None
            else settings.shopify_fallback_versions_list
        )
        self.oldest_api_version = oldest_api_version or settings.shopify_oldest_api_version
        self.timeout = timeout if timeout is not None else settings.shopify_request_timeout
        self._client = client

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

    @property
    def is_configured(self) -> bool:
        return bool(self.shop_domain and self.access_token)

    def _url(self, api_version: str, resource: str) -> str:
        return f"https://{self.shop_domain}/admin/api/{api_version}/{resource}.json"

    async def _send(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(
                url, headers=self.headers, params=params, follow_redirects=True
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(
                url, headers=self.headers, params=params, follow_redirects=True
            )

    async def _get(
        self, resource: str, api_version: str, params: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """
        Single GET against one API version.

        Raises:
            UpstreamVersionMismatchError: Shopify answered 404.
            UpstreamUnavailableError: network failure, any other non-2xx
                status, or a body without the expected collection.
        """
        url = self._url(api_version, resource)
        start = time.perf_counter()
        try:
            response = await self._send(url, params)
        except httpx.RequestError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            perf_logger.log_upstream_call(
                resource, self.shop_domain, api_version, None, duration_ms, success=False
            )
            logger.error(f"Shopify API Request Error - No response received: {e!r}")
            raise UpstreamUnavailableError(self.shop_domain, original_error=str(e)) from e

        duration_ms = (time.perf_counter() - start) * 1000
        perf_logger.log_upstream_call(
            resource,
            self.shop_domain,
            api_version,
            response.status_code,
            duration_ms,
            success=response.is_success,
        )

        if response.status_code == 404:
            raise UpstreamVersionMismatchError(self.shop_domain, api_version)
        if not response.is_success:
            logger.error(
                f"Shopify API Error - Status: {response.status_code}",
                extra={"body": response.text[:200]},
            )
            raise UpstreamUnavailableError(
                self.shop_domain,
                status_code=response.status_code,
                original_error=response.text[:200],
            )

        try:
            records = response.json()[resource]
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamUnavailableError(
                self.shop_domain,
                status_code=response.status_code,
                original_error=f"Unexpected response body: {e!r}",
            ) from e
        if not isinstance(records, list):
            raise UpstreamUnavailableError(
                self.shop_domain,
                status_code=response.status_code,
                original_error=f"'{resource}' is not a list",
            )
        return records

    # ============ Orders ============

    async def fetch_orders_result(
        self,
        limit: int = 250,
        status: str = "any",
        created_at_min: Optional[Union[str, datetime]] = None,
    ) -> FetchResult:
        """Fetch orders, walking the fallback versions after a 404."""
        params: Dict[str, Any] = {"limit": limit, "status": status}
        if created_at_min:
            if isinstance(created_at_min, datetime):
                created_at_min = created_at_min.isoformat()
            params["created_at_min"] = created_at_min

        logger.info(
            f"Attempting to fetch orders from: {self._url(self.api_version, 'orders')}",
            extra={"access_token": "***masked***" if self.access_token else "MISSING"},
        )

        if not self.is_configured:
            logger.error("Missing required Shopify configuration: shop domain or access token")
            return FetchResult(failed=True)

        try:
            orders = await self._get("orders", self.api_version, params)
        except UpstreamVersionMismatchError:
            logger.warning(
                f"API version {self.api_version} returned 404, trying fallback versions",
                extra={"fallback_versions": self.fallback_versions},
            )
            return await self._fetch_orders_with_fallback(params)
        except UpstreamUnavailableError as e:
            logger.error(
                "Error fetching orders from Shopify, returning empty list",
                extra={"status_code": e.status_code},
            )
            return FetchResult(failed=True)

        logger.info(f"Successfully fetched {len(orders)} orders from {self.shop_domain}")
        return FetchResult(records=orders, api_version=self.api_version)

    async def _fetch_orders_with_fallback(self, params: Dict[str, Any]) -> FetchResult:
        # Fallback versions in order of stability, then the oldest stable version
        for version in [*self.fallback_versions, self.oldest_api_version]:
            logger.info(f"Trying fallback API version: {version}")
            try:
                orders = await self._get("orders", version, params)
            except ExternalServiceError as e:
                logger.warning(f"Fallback API version {version} also failed: {e.message}")
                continue

            logger.info(
                f"Successfully fetched {len(orders)} orders using fallback API version {version}"
            )
            return FetchResult(records=orders, api_version=version)

        logger.error("All fallback API versions failed, returning empty list")
        return FetchResult(failed=True)

    async def fetch_orders(
        self,
        limit: int = 250,
        status: str = "any",
        created_at_min: Optional[Union[str, datetime]] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch orders; empty list on any failure."""
        result = await self.fetch_orders_result(limit, status, created_at_min)
        return result.records

    # ============ Products ============

    async def fetch_products_result(self, limit: int = 250) -> FetchResult:
        """Fetch products from the configured API version only."""
        logger.info(
            f"Attempting to fetch products from: {self._url(self.api_version, 'products')}",
            extra={"access_token": "***masked***" if self.access_token else "MISSING"},
        )

        if not self.is_configured:
            logger.error("Missing required Shopify configuration: shop domain or access token")
            return FetchResult(failed=True)

        try:
            products = await self._get("products", self.api_version, {"limit": limit})
        except ExternalServiceError as e:
            logger.error(f"Error fetching products from Shopify: {e.message}")
            return FetchResult(failed=True)

        logger.info(f"Successfully fetched {len(products)} products from {self.shop_domain}")
        return FetchResult(records=products, api_version=self.api_version)

    async def fetch_products(self, limit: int = 250) -> List[Dict[str, Any]]:
        """Fetch products; empty list on any failure."""
        result = await self.fetch_products_result(limit)
        return result.records
