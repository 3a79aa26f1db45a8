"""HTTP client for the quote/load backend (products, exchange rates)."""

import logging
import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests
from pydantic import ValidationError

from ..config import get_api_endpoint, get_api_key, get_api_timeout, get_app_name, get_app_version
from ..models.product import Product, ProductOption
from .models import ExchangeRatePayload, ProductPayload

logger = logging.getLogger(__name__)


class PricingApiError(Exception):
    """Base exception for backend API errors."""
    pass


class ApiConnectionError(PricingApiError):
    """Raised when connection to the backend fails or times out."""
    pass


class ApiResponseError(PricingApiError):
    """Raised when the backend returns an error status or an unusable body."""
    pass


class ApiClient:
    """Client for catalog and exchange-rate endpoints."""

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: int = 15
    ):
        """Initialize API client.

        Args:
            endpoint: Base URL of the backend (e.g., "https://api.example.com/v1/")
            api_key: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.endpoint = endpoint.rstrip('/') + '/'
        self.api_key = api_key
        self.timeout = timeout

        self.headers = {
            'Accept': 'application/json',
            'User-Agent': f'{get_app_name()}/{get_app_version()}',
        }
        if api_key:
            self.headers['Authorization'] = f'Bearer {api_key}'
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Session of the calling thread.

        The async services run requests in worker threads and a
        requests.Session is not safe to share between them.
        """
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET path relative to endpoint and return the decoded JSON body.

        Raises:
            ApiConnectionError: If connection fails or times out
            ApiResponseError: If the API returns an error status or invalid JSON
        """
        url = urljoin(self.endpoint, path.lstrip('/'))

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise ApiConnectionError(f"Request to {url} timed out after {self.timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise ApiConnectionError(f"Failed to connect to {url}: {e}")
        except requests.exceptions.HTTPError as e:
            error_msg = f"API error: {e.response.status_code}"
            try:
                error_data = e.response.json()
                error_msg += f" - {error_data.get('message') or error_data.get('error') or 'Unknown error'}"
            except (ValueError, AttributeError):
                error_msg += f" - {e.response.text[:200]}"
            raise ApiResponseError(error_msg)
        except requests.exceptions.RequestException as e:
            raise PricingApiError(f"Unexpected error: {e}")

        try:
            return response.json()
        except ValueError as e:
            raise ApiResponseError(f"Invalid JSON from {url}: {e}")

    @staticmethod
    def _data(body: Any) -> Any:
        if isinstance(body, dict):
            return body.get('data')
        return None

    def search_products(self, query: str, per_page: int = 20) -> List[ProductOption]:
        """Search the product catalog.

        Args:
            query: Free text search
            per_page: Maximum number of candidates

        Returns:
            Product options in API order; malformed entries are skipped
        """
        body = self._get('products', params={'search': query, 'per_page': per_page})
        data = self._data(body)
        if isinstance(data, dict):
            items = data.get('products') or []
        elif isinstance(data, list):
            items = data
        else:
            items = []

        options: List[ProductOption] = []
        for item in items:
            try:
                options.append(ProductPayload.model_validate(item).to_option())
            except ValidationError as e:
                logger.warning(f"Skipping malformed product in search result: {e.error_count()} error(s)")
        return options

    def get_product(self, product_id: int) -> Product:
        """Fetch one product by id.

        Raises:
            ApiResponseError: If the product body is missing or malformed
        """
        body = self._get(f'products/{product_id}')
        data = self._data(body)
        if isinstance(data, dict) and isinstance(data.get('product'), dict):
            data = data['product']
        if not isinstance(data, dict):
            raise ApiResponseError(f"Product {product_id} missing in response")
        try:
            return ProductPayload.model_validate(data).to_product()
        except ValidationError as e:
            raise ApiResponseError(f"Malformed product {product_id}: {e}")

    def get_exchange_rate(self, currency: str) -> Decimal:
        """Fetch current rate from currency to base currency.

        Raises:
            ApiResponseError: If the body carries no positive rate
        """
        body = self._get(f'exchange-rates/current/{currency}')
        try:
            payload = ExchangeRatePayload.model_validate(body if isinstance(body, dict) else {})
        except ValidationError as e:
            raise ApiResponseError(f"Malformed exchange rate for {currency}: {e}")
        if payload.rate is None or payload.rate <= 0:
            raise ApiResponseError(f"No exchange rate for {currency} in response")
        return payload.rate

    def health_check(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if service is available, False otherwise
        """
        url = urljoin(self.endpoint, 'health')
        try:
            response = self.session.get(url, timeout=5)
            return response.status_code == 200
        except requests.exceptions.RequestException:
            return False


def create_api_client() -> ApiClient:
    """Create client from configured endpoint, key and timeout.

    Raises:
        PricingApiError: If no endpoint is configured
    """
    endpoint = get_api_endpoint()
    if not endpoint:
        raise PricingApiError("No API endpoint configured (set LOAD_PRICING_API_ENDPOINT)")
    return ApiClient(endpoint, api_key=get_api_key(), timeout=get_api_timeout())
