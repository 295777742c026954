"""
HTTP client for the storefront REST API.

Every remote call in the application goes through StorefrontAPIClient.
It is the one place where:
    - the bearer credential is attached (via the session's credential hook)
    - 401 responses trigger the session's unauthorized hook, exactly once
    - transport errors become NetworkFailure
    - error bodies become RemoteRejection with the backend's own message

TIMEOUTS AND RETRIES:
    Every request carries a bounded timeout. Idempotent methods (GET, PUT,
    DELETE) are retried once on connect/read failure by urllib3's Retry
    mounted on the requests.Session. POST and PATCH are never retried.

Usage:
    api_client = StorefrontAPIClient("http://localhost:8000/api")
    session_manager = SessionManager(api_client, store)  # installs hooks

    products = api_client.list_products({"category": "books"})
    order = api_client.update_order_status(3, "confirmed")
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import (
    AuthenticationFailure,
    AuthorizationFailure,
    NetworkFailure,
    RemoteRejection,
    extract_error_message,
)
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_RETRY_ATTEMPTS = 1
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})

LOGIN_PATH = "/auth/login"


def build_http_session(retry_attempts: int = DEFAULT_RETRY_ATTEMPTS) -> requests.Session:
    """
    Create a requests.Session with the retry-once policy mounted.

    Only connection and read failures are retried; HTTP error statuses are
    returned to the caller untouched.

    Args:
        retry_attempts: Extra attempts for idempotent requests (default 1)

    Returns:
        Configured requests.Session
    """
    retry = Retry(
        total=retry_attempts,
        connect=retry_attempts,
        read=retry_attempts,
        status=0,
        backoff_factor=0.2,
        allowed_methods=IDEMPOTENT_METHODS,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)

    http = requests.Session()
    http.mount("http://", adapter)
    http.mount("https://", adapter)
    http.headers.update({"Accept": "application/json"})
    return http


class StorefrontAPIClient:
    """
    Thin wrapper around the storefront REST endpoints.

    Methods return decoded JSON (dicts/lists). Mapping to models happens in
    the services layer.

    Attributes:
        base_url: API root without trailing slash
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        http_session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. "http://localhost:8000/api"
            http_session: Pre-built session (tests inject a fake here)
            timeout: Per-request timeout in seconds
            retry_attempts: Retry budget for idempotent requests

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required - set STOREFRONT_API_URL")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http_session or build_http_session(retry_attempts)

        self._credential_hook: Callable[[Dict[str, str]], Dict[str, str]] = lambda headers: headers
        self._unauthorized_hook: Optional[Callable[[str], None]] = None

        logger.debug(f"StorefrontAPIClient initialized for {self.base_url}")

    def install_session_hooks(
        self,
        attach_credential: Callable[[Dict[str, str]], Dict[str, str]],
        on_unauthorized: Callable[[str], None],
    ) -> None:
        """
        Connect the client to a session manager.

        Args:
            attach_credential: Decorates outgoing headers with the bearer token
            on_unauthorized: Called once for every 401 outside the login endpoint
        """
        self._credential_hook = attach_credential
        self._unauthorized_hook = on_unauthorized

    # =========================================================================
    # REQUEST CORE
    # =========================================================================

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        fallback_message: str = "The storefront service rejected the request",
    ) -> Any:
        """
        Send one request and decode the response.

        Returns:
            Decoded JSON body, or None for empty bodies

        Raises:
            AuthorizationFailure: 401 from any endpoint but login
            AuthenticationFailure: 401 from the login endpoint
            RemoteRejection: Any other non-2xx status
            NetworkFailure: No response was received
        """
        url = f"{self.base_url}{path}"
        headers = self._credential_hook({})

        logger.debug(f"{method} {path}")

        try:
            response = self._http.request(
                method,
                url,
                json=json,
                data=data,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"{method} {path} timed out after {self.timeout}s")
            raise NetworkFailure("The storefront service did not respond in time", cause=str(e))
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkFailure(cause=str(e))

        status_code = response.status_code
        body = self._decode(response)

        if status_code == 401:
            if path == LOGIN_PATH:
                raise AuthenticationFailure(
                    extract_error_message(body, "Invalid phone number or password"),
                    status_code=status_code,
                )
            logger.warning(f"{method} {path} returned 401 - clearing session")
            if self._unauthorized_hook is not None:
                self._unauthorized_hook(path)
            raise AuthorizationFailure(path=path)

        if status_code >= 400:
            message = extract_error_message(body, fallback_message)
            logger.info(f"{method} {path} rejected ({status_code}): {message}")
            raise RemoteRejection(message, status_code=status_code, payload=body)

        return body

    @staticmethod
    def _decode(response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # =========================================================================
    # AUTH
    # =========================================================================

    def signup(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        """Register a new account. POST /auth/signup"""
        return self._request("POST", "/auth/signup", json=profile, fallback_message="Failed to sign up")

    def login(self, phone: str, password: str) -> Dict[str, Any]:
        """
        Exchange credentials for a token pair. POST /auth/login (form-encoded)

        Returns:
            {"access_token": ..., "refresh_token": ...?}
        """
        body = self._request(
            "POST",
            LOGIN_PATH,
            data={"username": phone, "password": password},
            fallback_message="Login failed",
        )
        return body or {}

    def logout(self) -> None:
        """Invalidate the token server-side. POST /auth/logout"""
        self._request("POST", "/auth/logout", fallback_message="Logout failed")

    def get_me(self) -> Dict[str, Any]:
        """Resolve the current user. GET /users/me/get"""
        return self._request("GET", "/users/me/get", fallback_message="Failed to load user")

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def list_products(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """GET /products/"""
        return self._request("GET", "/products/", params=params, fallback_message="Failed to load products") or []

    def get_product(self, product_id: int) -> Dict[str, Any]:
        """GET /products/{id}"""
        return self._request("GET", f"/products/{product_id}", fallback_message="Failed to load product")

    def create_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /products/"""
        return self._request("POST", "/products/", json=payload, fallback_message="Failed to create product")

    def list_my_products(self) -> List[Dict[str, Any]]:
        """GET /products/my/"""
        return self._request("GET", "/products/my/", fallback_message="Failed to load your products") or []

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """PUT /products/{id}"""
        return self._request(
            "PUT", f"/products/{product_id}", json=payload, fallback_message="Failed to update product"
        )

    def delete_product(self, product_id: int) -> None:
        """DELETE /products/{id}"""
        self._request("DELETE", f"/products/{product_id}", fallback_message="Failed to delete product")

    # =========================================================================
    # ORDERS
    # =========================================================================

    def list_orders(self) -> List[Dict[str, Any]]:
        """GET /orders/"""
        return self._request("GET", "/orders/", fallback_message="Failed to load orders") or []

    def get_order(self, order_id: int) -> Dict[str, Any]:
        """GET /orders/{id}"""
        return self._request("GET", f"/orders/{order_id}", fallback_message="Failed to load order")

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /orders/"""
        return self._request("POST", "/orders/", json=payload, fallback_message="Failed to create order")

    def list_my_orders(self) -> List[Dict[str, Any]]:
        """GET /orders/my/ (buyer view)"""
        return self._request("GET", "/orders/my/", fallback_message="Failed to load your orders") or []

    def list_my_sales(self) -> List[Dict[str, Any]]:
        """GET /orders/my/sales/ (seller view)"""
        return self._request("GET", "/orders/my/sales/", fallback_message="Failed to load your sales") or []

    def update_order(self, order_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """PUT /orders/{id}"""
        return self._request("PUT", f"/orders/{order_id}", json=payload, fallback_message="Failed to update order")

    def update_order_status(self, order_id: int, new_status: str) -> Dict[str, Any]:
        """PATCH /orders/{id}/status?new_status=..."""
        return self._request(
            "PATCH",
            f"/orders/{order_id}/status",
            params={"new_status": new_status},
            fallback_message="Failed to update order status",
        )

    def delete_order(self, order_id: int) -> None:
        """DELETE /orders/{id}"""
        self._request("DELETE", f"/orders/{order_id}", fallback_message="Failed to delete order")
