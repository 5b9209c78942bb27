"""Component tests running the real services behind the API.

Storage is replaced by the in-memory repositories from tests.fakes; everything
else (validation, routing, services, auth) is the production code.
"""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from restaurant_ordering_service.auth.token_validator import TokenValidator
from restaurant_ordering_service.client.ordering_client import OrderingClient
from restaurant_ordering_service.client.session import ClientSession
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.services.auth_service import AuthService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService
from tests.fakes import (
    InMemoryMenuRepository,
    InMemoryOrderRepository,
    InMemoryUserRepository,
    make_menu_item,
)


@pytest.fixture
def app(
    menu_repository: InMemoryMenuRepository,
    order_repository: InMemoryOrderRepository,
    user_repository: InMemoryUserRepository,
    token_validator: TokenValidator,
) -> FastAPI:
    menu_repository.save_item(make_menu_item())
    return create_app(
        menu_service=MenuService(menu_repository=menu_repository),
        order_service=OrderService(
            order_repository=order_repository, menu_repository=menu_repository
        ),
        auth_service=AuthService(user_repository=user_repository, token_validator=token_validator),
        token_validator=token_validator,
    )


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _place(client: TestClient, headers: dict[str, str], *lines: tuple[str, int]) -> dict:
    response = client.post(
        "/orders",
        json={"items": [{"menuItemId": item_id, "quantity": qty} for item_id, qty in lines]},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["order"]


@pytest.mark.component
class TestPlaceOrder:
    """Scenarios for order placement."""

    def test_single_line_order(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Soup at 6.99 x2 totals 13.98 and starts pending."""
        order = _place(client, auth_headers, ("item_soup", 2))

        assert order["status"] == "pending"
        assert order["totalAmount"] == pytest.approx(13.98)
        assert order["items"][0]["price"] == pytest.approx(6.99)
        assert order["items"][0]["menuItem"]["name"] == "Soup"

    def test_unavailable_item_rejected_and_nothing_stored(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        order_repository: InMemoryOrderRepository,
    ) -> None:
        response = client.post(
            "/orders",
            json={
                "items": [
                    {"menuItemId": "item_burger", "quantity": 1},
                    {"menuItemId": "item_cake", "quantity": 1},
                ]
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Menu item not available: Cake"}
        assert order_repository.orders == {}

    def test_missing_item_rejected(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        order_repository: InMemoryOrderRepository,
    ) -> None:
        response = client.post(
            "/orders",
            json={"items": [{"menuItemId": "item_ghost", "quantity": 1}]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Menu item not found: item_ghost"}
        assert order_repository.orders == {}

    def test_empty_order_rejected(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post("/orders", json={"items": []}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"detail": "Order items are required"}

    def test_zero_quantity_rejected(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post(
            "/orders",
            json={"items": [{"menuItemId": "item_soup", "quantity": 0}]},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_oversized_values_rejected_as_bad_request(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        order = client.post(
            "/orders",
            json={"items": [{"menuItemId": "item_soup", "quantity": 10**40}]},
            headers=auth_headers,
        )
        menu = client.post(
            "/menu",
            json={"name": "Caviar", "price": "1e40", "category": "mains"},
            headers=auth_headers,
        )

        assert order.status_code == 400
        assert menu.status_code == 400

    def test_price_change_after_ordering_is_not_applied(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        order = _place(client, auth_headers, ("item_soup", 2))

        response = client.put("/menu/item_soup", json={"price": 9.5}, headers=auth_headers)
        assert response.status_code == 200

        reloaded = client.get(f"/orders/{order['id']}", headers=auth_headers).json()
        assert reloaded["items"][0]["price"] == pytest.approx(6.99)
        assert reloaded["totalAmount"] == pytest.approx(13.98)


@pytest.mark.component
class TestManageOrder:
    """Scenarios for changing an order after placement."""

    def test_remove_line_recomputes_total(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        """10.00 x1 + 5.00 x3 = 25.00; removing the second line leaves 10.00."""
        order = _place(client, auth_headers, ("item_burger", 1), ("item_juice", 3))
        assert order["totalAmount"] == pytest.approx(25.00)

        second_line = order["items"][1]["id"]
        response = client.delete(f"/orders/{order['id']}/items/{second_line}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["totalAmount"] == pytest.approx(10.00)
        assert len(response.json()["items"]) == 1

    def test_update_quantity_recomputes_total(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        order = _place(client, auth_headers, ("item_burger", 1), ("item_juice", 3))
        line_id = order["items"][0]["id"]

        response = client.put(
            f"/orders/{order['id']}/items/{line_id}", json={"quantity": 2}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["totalAmount"] == pytest.approx(35.00)

    def test_removing_last_line_deletes_order(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        order = _place(client, auth_headers, ("item_soup", 1))
        line_id = order["items"][0]["id"]

        response = client.delete(f"/orders/{order['id']}/items/{line_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["orderDeleted"] is True
        assert client.get(f"/orders/{order['id']}", headers=auth_headers).status_code == 404

    def test_confirmed_order_lines_are_frozen(
        self, client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        order = _place(client, auth_headers, ("item_soup", 1))
        line_id = order["items"][0]["id"]

        status = client.put(
            f"/orders/{order['id']}/status", json={"status": "confirmed"}, headers=auth_headers
        )
        assert status.status_code == 200
        assert status.json()["status"] == "confirmed"

        update = client.put(
            f"/orders/{order['id']}/items/{line_id}", json={"quantity": 5}, headers=auth_headers
        )
        remove = client.delete(f"/orders/{order['id']}/items/{line_id}", headers=auth_headers)

        assert update.status_code == 400
        assert update.json() == {"detail": "Cannot modify confirmed orders"}
        assert remove.status_code == 400

    def test_invalid_status_rejected(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        order = _place(client, auth_headers, ("item_soup", 1))

        response = client.put(
            f"/orders/{order['id']}/status", json={"status": "shipped"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid status"}
        reloaded = client.get(f"/orders/{order['id']}", headers=auth_headers).json()
        assert reloaded["status"] == "pending"

    def test_orders_are_private_to_their_owner(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        token_validator: TokenValidator,
    ) -> None:
        order = _place(client, auth_headers, ("item_soup", 1))
        other = {"Authorization": f"Bearer {token_validator.issue('usr_other')}"}

        assert client.get(f"/orders/{order['id']}", headers=other).status_code == 404
        assert client.delete(f"/orders/{order['id']}", headers=other).status_code == 404
        assert client.get("/orders", headers=other).json() == []

    def test_delete_order(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        order = _place(client, auth_headers, ("item_soup", 1))

        response = client.delete(f"/orders/{order['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert client.get("/orders", headers=auth_headers).json() == []


@pytest.mark.component
class TestMenuCatalog:
    def test_unavailable_items_hidden_from_menu(self, client: TestClient) -> None:
        ids = [item["id"] for item in client.get("/menu").json()]

        assert "item_cake" not in ids
        assert client.get("/menu/item_cake").json()["isAvailable"] is False

    def test_create_then_list(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        created = client.post(
            "/menu",
            json={"name": "Garden Salad", "price": 8.25, "category": "SALADS"},
            headers=auth_headers,
        )

        assert created.status_code == 201
        assert created.json()["category"] == "salads"
        assert client.get("/menu").json()[0]["id"] == created.json()["id"]


@pytest.mark.component
class TestClientAgainstApp:
    """Drive the HTTP client against the ASGI app in-process."""

    @pytest.mark.asyncio
    async def test_register_browse_order_and_cancel(self, app: FastAPI) -> None:
        session = ClientSession()
        client = OrderingClient(
            base_url="http://ordering.test",
            session=session,
            transport=httpx.ASGITransport(app=app),
        )

        user = await client.register("ana@example.com", "secret123", "Ana Lima")
        assert user is not None
        assert session.is_authenticated

        menu = await client.get_menu()
        assert menu is not None
        soup = next(item for item in menu if item.name == "Soup")

        session.cart.add(soup.id, 2)
        order = await client.place_order()
        assert order is not None
        assert float(order.total_amount) == pytest.approx(13.98)
        assert session.cart.is_empty

        cancelled = await client.cancel_order(order.id)
        assert cancelled is not None
        assert cancelled.status.value == "cancelled"

        assert await client.update_line_quantity(order.id, order.items[0].id, 3) is None
        assert client.last_error == "Cannot modify confirmed orders"

    @pytest.mark.asyncio
    async def test_duplicate_registration_and_login(self, app: FastAPI) -> None:
        client = OrderingClient(
            base_url="http://ordering.test",
            session=ClientSession(),
            transport=httpx.ASGITransport(app=app),
        )
        await client.register("ana@example.com", "secret123", "Ana")
        client.logout()

        assert await client.register("ANA@example.com", "secret123", "Ana") is None
        assert client.last_error == "User already exists"

        user = await client.login("ana@example.com", "secret123")
        assert user is not None
        me = await client.get_current_user()
        assert me is not None
        assert me.email == "ana@example.com"
