"""FastAPI application exposing the menu, order and account endpoints."""

import logging

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from restaurant_ordering_service.auth.api_dependencies import get_user_id_from_header
from restaurant_ordering_service.auth.token_validator import TokenValidator
from restaurant_ordering_service.exceptions import OrderingServiceError
from restaurant_ordering_service.models.menu_models import MenuItem, MenuItemCreate, MenuItemUpdate
from restaurant_ordering_service.models.order_models import (
    CreateOrderRequest,
    CreateOrderResponse,
    LineQuantityUpdate,
    OrderDeletedResponse,
    OrderStatusUpdate,
    OrderView,
)
from restaurant_ordering_service.models.user_models import (
    AuthResponse,
    LoginRequest,
    PublicUser,
    RegisterRequest,
)
from restaurant_ordering_service.services.auth_service import AuthService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class MessageResponse(BaseModel):
    """Plain acknowledgement for deletes."""

    message: str


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


def create_app(
    menu_service: MenuService,
    order_service: OrderService,
    auth_service: AuthService,
    token_validator: TokenValidator,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_service: Service for the menu catalog
        order_service: Service for the order lifecycle
        auth_service: Service for registration and login
        token_validator: Validator for bearer tokens on protected routes
        cors_origins: Browser origins allowed to call the API

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Restaurant Ordering API",
        description="Menu browsing, order placement and order management",
        version="1.0.0",
    )

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Services live in app state so tests can swap them per client
    app.state.menu_service = menu_service
    app.state.order_service = order_service
    app.state.auth_service = auth_service
    app.state.token_validator = token_validator

    @app.exception_handler(OrderingServiceError)
    async def handle_service_error(_request: Request, exc: OrderingServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"Service failure: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": _format_validation_error(exc)})

    def current_user_id(authorization: str | None = Header(None)) -> str:
        """Dependency resolving the caller from the bearer token."""
        return get_user_id_from_header(
            authorization=authorization, validator=app.state.token_validator
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Accounts

    @app.post("/auth/register", response_model=AuthResponse, status_code=201, tags=["Auth"])
    async def register(payload: RegisterRequest) -> AuthResponse:
        result: AuthResponse = await app.state.auth_service.register(payload)
        return result

    @app.post("/auth/login", response_model=AuthResponse, tags=["Auth"])
    async def login(payload: LoginRequest) -> AuthResponse:
        result: AuthResponse = await app.state.auth_service.login(payload.email, payload.password)
        return result

    @app.get("/auth/me", response_model=PublicUser, tags=["Auth"])
    async def me(user_id: str = Depends(current_user_id)) -> PublicUser:
        user: PublicUser = await app.state.auth_service.get_user(user_id)
        return user

    # Menu catalog

    @app.get("/menu", response_model=list[MenuItem], tags=["Menu"])
    async def list_menu() -> list[MenuItem]:
        """List available menu items, newest first."""
        items: list[MenuItem] = await app.state.menu_service.list_menu()
        return items

    @app.get("/menu/{item_id}", response_model=MenuItem, tags=["Menu"])
    async def get_menu_item(item_id: str) -> MenuItem:
        item: MenuItem = await app.state.menu_service.get_menu_item(item_id)
        return item

    @app.post("/menu", response_model=MenuItem, status_code=201, tags=["Menu"])
    async def create_menu_item(
        payload: MenuItemCreate,
        _user_id: str = Depends(current_user_id),
    ) -> MenuItem:
        item: MenuItem = await app.state.menu_service.create_menu_item(payload)
        return item

    @app.put("/menu/{item_id}", response_model=MenuItem, tags=["Menu"])
    async def update_menu_item(
        item_id: str,
        payload: MenuItemUpdate,
        _user_id: str = Depends(current_user_id),
    ) -> MenuItem:
        item: MenuItem = await app.state.menu_service.update_menu_item(item_id, payload)
        return item

    @app.delete("/menu/{item_id}", response_model=MessageResponse, tags=["Menu"])
    async def delete_menu_item(
        item_id: str,
        _user_id: str = Depends(current_user_id),
    ) -> MessageResponse:
        await app.state.menu_service.delete_menu_item(item_id)
        return MessageResponse(message="Menu item deleted successfully")

    # Orders

    @app.get("/orders", response_model=list[OrderView], tags=["Orders"])
    async def list_orders(user_id: str = Depends(current_user_id)) -> list[OrderView]:
        """List the caller's orders, newest first."""
        orders: list[OrderView] = await app.state.order_service.list_orders(user_id)
        return orders

    @app.get("/orders/{order_id}", response_model=OrderView, tags=["Orders"])
    async def get_order(order_id: str, user_id: str = Depends(current_user_id)) -> OrderView:
        order: OrderView = await app.state.order_service.get_order(user_id, order_id)
        return order

    @app.post("/orders", response_model=CreateOrderResponse, status_code=201, tags=["Orders"])
    async def create_order(
        payload: CreateOrderRequest,
        user_id: str = Depends(current_user_id),
    ) -> CreateOrderResponse:
        """Place an order from cart lines."""
        order: OrderView = await app.state.order_service.create_order(user_id, payload.items)
        return CreateOrderResponse(message="Order created successfully", order=order)

    @app.put("/orders/{order_id}/status", response_model=OrderView, tags=["Orders"])
    async def update_order_status(
        order_id: str,
        payload: OrderStatusUpdate,
        user_id: str = Depends(current_user_id),
    ) -> OrderView:
        order: OrderView = await app.state.order_service.update_status(
            user_id, order_id, payload.status
        )
        return order

    @app.put("/orders/{order_id}/items/{line_id}", response_model=OrderView, tags=["Orders"])
    async def update_order_line(
        order_id: str,
        line_id: str,
        payload: LineQuantityUpdate,
        user_id: str = Depends(current_user_id),
    ) -> OrderView:
        order: OrderView = await app.state.order_service.update_line_quantity(
            user_id, order_id, line_id, payload.quantity
        )
        return order

    @app.delete(
        "/orders/{order_id}/items/{line_id}",
        response_model=OrderView | OrderDeletedResponse,
        tags=["Orders"],
    )
    async def remove_order_line(
        order_id: str,
        line_id: str,
        user_id: str = Depends(current_user_id),
    ) -> OrderView | OrderDeletedResponse:
        """Remove a line; the order itself is deleted when no lines remain."""
        result = await app.state.order_service.remove_line(user_id, order_id, line_id)
        if result.order_deleted:
            return OrderDeletedResponse(message="Order deleted (no items remaining)")
        order: OrderView = result.order
        return order

    @app.delete("/orders/{order_id}", response_model=MessageResponse, tags=["Orders"])
    async def delete_order(
        order_id: str,
        user_id: str = Depends(current_user_id),
    ) -> MessageResponse:
        await app.state.order_service.delete_order(user_id, order_id)
        return MessageResponse(message="Order deleted successfully")

    return app
