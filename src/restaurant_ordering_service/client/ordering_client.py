"""HTTP client for the ordering API."""

import logging
from typing import Any

import httpx

from restaurant_ordering_service.client.session import ClientSession
from restaurant_ordering_service.models.menu_models import MenuItem
from restaurant_ordering_service.models.order_models import OrderStatus, OrderView
from restaurant_ordering_service.models.user_models import AuthResponse, PublicUser

logger = logging.getLogger(__name__)


class OrderingClient:
    """Async client for the ordering REST API.

    Every call carries the bearer token of the given ClientSession. Failed
    requests are logged and reported as None/False; the last error message
    from the server is kept in ``last_error`` for display.
    """

    def __init__(
        self,
        base_url: str,
        session: ClientSession,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the ordering API (e.g., "http://localhost:8000")
            session: Session holding the token and cart
            transport: Optional httpx transport (used by tests)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.transport = transport
        self.timeout = timeout
        self.last_error: str | None = None

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> Any | None:
        """Send a request and return the decoded body, or None on failure."""
        self.last_error = None
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, transport=self.transport, timeout=self.timeout
            ) as client:
                response = await client.request(
                    method, path, json=json, headers=self.session.auth_headers()
                )
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            self.last_error = _error_detail(e.response)
            logger.error(f"{method} {path} failed with {e.response.status_code}: {self.last_error}")
            return None
        except httpx.RequestError as e:
            self.last_error = str(e) or "Request failed"
            logger.error(f"{method} {path} failed: {e}")
            return None

    # Accounts

    async def register(self, email: str, password: str, full_name: str) -> PublicUser | None:
        data = await self._request(
            "POST",
            "/auth/register",
            json={"email": email, "password": password, "fullName": full_name},
        )
        return self._start_session(data)

    async def login(self, email: str, password: str) -> PublicUser | None:
        data = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        return self._start_session(data)

    def logout(self) -> None:
        self.session.end()

    async def get_current_user(self) -> PublicUser | None:
        data = await self._request("GET", "/auth/me")
        return PublicUser.model_validate(data) if data is not None else None

    def _start_session(self, data: Any | None) -> PublicUser | None:
        if data is None:
            return None
        auth = AuthResponse.model_validate(data)
        self.session.start(auth.user, auth.token)
        return auth.user

    # Menu

    async def get_menu(self) -> list[MenuItem] | None:
        data = await self._request("GET", "/menu")
        if data is None:
            return None
        return [MenuItem.model_validate(item) for item in data]

    async def get_menu_item(self, item_id: str) -> MenuItem | None:
        data = await self._request("GET", f"/menu/{item_id}")
        return MenuItem.model_validate(data) if data is not None else None

    # Orders

    async def place_order(self) -> OrderView | None:
        """Submit the session cart as an order and clear it on success.

        Returns:
            The created order, or None if the cart is empty or the request failed
        """
        if self.session.cart.is_empty:
            self.last_error = "Please add items to cart"
            logger.warning("Refusing to place an order from an empty cart")
            return None

        data = await self._request(
            "POST", "/orders", json={"items": self.session.cart.to_order_lines()}
        )
        if data is None:
            return None

        self.session.cart.clear()
        return OrderView.model_validate(data["order"])

    async def list_orders(self) -> list[OrderView] | None:
        data = await self._request("GET", "/orders")
        if data is None:
            return None
        return [OrderView.model_validate(order) for order in data]

    async def get_order(self, order_id: str) -> OrderView | None:
        data = await self._request("GET", f"/orders/{order_id}")
        return OrderView.model_validate(data) if data is not None else None

    async def update_status(self, order_id: str, status: OrderStatus | str) -> OrderView | None:
        value = status.value if isinstance(status, OrderStatus) else status
        data = await self._request("PUT", f"/orders/{order_id}/status", json={"status": value})
        return OrderView.model_validate(data) if data is not None else None

    async def cancel_order(self, order_id: str) -> OrderView | None:
        return await self.update_status(order_id, OrderStatus.CANCELLED)

    async def update_line_quantity(
        self, order_id: str, line_id: str, quantity: int
    ) -> OrderView | None:
        data = await self._request(
            "PUT", f"/orders/{order_id}/items/{line_id}", json={"quantity": quantity}
        )
        return OrderView.model_validate(data) if data is not None else None

    async def remove_line(self, order_id: str, line_id: str) -> OrderView | bool | None:
        """Remove a line from an order.

        Returns:
            The updated order, True if the order was deleted because it had no
            lines left, or None on failure
        """
        data = await self._request("DELETE", f"/orders/{order_id}/items/{line_id}")
        if data is None:
            return None
        if data.get("orderDeleted"):
            return True
        return OrderView.model_validate(data)

    async def delete_order(self, order_id: str) -> bool:
        return await self._request("DELETE", f"/orders/{order_id}") is not None


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)
