import logging
import httpx
from typing import Any, Dict, List, Optional

from voltedge.core.config import settings

logger = logging.getLogger(__name__)


class BackendAPIError(Exception):
    """
    Non-2xx answer (or no answer) from the backend REST API.

    `payload` is the JSON body relayed to our own caller: the backend's
    {error} / {message} body when it sent one, otherwise {"error": ...}.
    """

    def __init__(self, status_code: int, payload: Dict[str, Any]):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"{status_code} - {payload}")

    @classmethod
    def from_response(cls, response: httpx.Response, fallback: str) -> "BackendAPIError":
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and ("error" in body or "message" in body):
            payload = {k: body[k] for k in ("error", "message") if k in body}
        else:
            payload = {"error": fallback}
        return cls(response.status_code, payload)


class BackendClient:
    """HTTP client for the VoltEdge backend REST API."""

    def __init__(self, base_url: str = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.BACKEND_API_BASE_URL).rstrip("/")
        self.transport = transport
        self.client = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=settings.BACKEND_TIMEOUT_SECONDS, transport=self.transport)
        return self.client

    @staticmethod
    def _headers(access_token: Optional[str]) -> dict:
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _request(self, method: str, path: str, fallback: str, access_token: Optional[str] = None, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            client = await self._get_client()
            response = await client.request(method, url, headers=self._headers(access_token), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Backend request {method} {url} failed: {str(e)}")
            raise BackendAPIError(500, {"error": "Internal Server Error"})

        if response.is_error:
            logger.error(f"Backend {method} {url} failed with status {response.status_code}: {response.text}")
            raise BackendAPIError.from_response(response, fallback)

        try:
            result = response.json()
        except ValueError:
            logger.error(f"Backend {method} {url} returned a non-JSON body: {response.text[:200]!r}")
            raise BackendAPIError(500, {"error": "Internal Server Error"})

        if not isinstance(result, dict):
            logger.error(f"Backend {method} {url} returned {type(result).__name__}, expected an object")
            raise BackendAPIError(500, {"error": "Internal Server Error"})

        return result

    async def get_product(self, product_id: str, access_token: Optional[str] = None) -> dict:
        """GET /products/{id}"""
        logger.info(f"Fetching product {product_id} from backend")
        return await self._request(
            "GET",
            f"/products/{product_id}",
            "Failed to fetch product",
            access_token=access_token,
        )

    async def create_order(
        self,
        access_token: str,
        shipping_address_id: str,
        billing_address_id: str,
        payment_method: str,
        items: List[Dict[str, Any]],
        coupon_codes: Optional[List[str]] = None
    ) -> dict:
        """
        Create order on backend.

        POST /orders
        {
          "shippingAddressId": "...",
          "billingAddressId": "...",
          "paymentMethod": "CREDIT_CARD",
          "couponCodes": [],
          "items": [{"productId": "p1", "quantity": 2}]
        }

        Returns the created order, including its "id".
        """
        payload = {
            "shippingAddressId": shipping_address_id,
            "billingAddressId": billing_address_id,
            "paymentMethod": payment_method,
            "couponCodes": coupon_codes or [],
            "items": items,
        }
        logger.info(f"Creating order on backend with {len(items)} items")
        logger.debug(f"Order payload: {payload}")

        result = await self._request(
            "POST",
            "/orders",
            "Failed to place order",
            access_token=access_token,
            json=payload,
        )
        logger.info(f"Backend order created successfully: {result.get('id')}")
        return result

    async def close(self):
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None


# Global instance
backend_client = BackendClient()
