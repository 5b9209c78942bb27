"""Shared dependency factory for the Lambda handler.

Dependencies are created once and reused across invocations within the same
Lambda container to keep warm starts cheap.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from restaurant_ordering_service.auth.token_validator import TokenValidator
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.observability import configure_logging
from restaurant_ordering_service.repositories.menu_repository import MenuItemRepository
from restaurant_ordering_service.repositories.order_repository import OrderRepository
from restaurant_ordering_service.repositories.user_repository import UserRepository
from restaurant_ordering_service.services.auth_service import AuthService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_dynamodb_resource: Any | None = None
_menu_repository: MenuItemRepository | None = None
_token_validator: TokenValidator | None = None
_fastapi_app: FastAPI | None = None


def get_dynamodb_resource() -> Any:
    """Return the container-wide DynamoDB resource, creating it on first use."""
    global _dynamodb_resource

    if _dynamodb_resource is None:
        options: dict[str, Any] = {"region_name": os.getenv("AWS_REGION", "us-east-1")}
        endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
        if endpoint_url:
            options.update(
                endpoint_url=endpoint_url,
                aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
                aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            )
        logger.info(f"Connecting to DynamoDB ({endpoint_url or options['region_name']})")
        _dynamodb_resource = boto3.resource("dynamodb", **options)

    return _dynamodb_resource


def get_menu_repository() -> MenuItemRepository:
    """Create or retrieve the cached menu repository.

    Shared by the menu and order services.
    """
    global _menu_repository

    if _menu_repository is None:
        _menu_repository = MenuItemRepository(
            dynamodb_resource=get_dynamodb_resource(),
            table_name=os.getenv("DYNAMODB_MENU_TABLE", "restaurant-menu-items"),
        )
    return _menu_repository


def get_token_validator() -> TokenValidator:
    """Create or retrieve the cached token validator.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    global _token_validator

    if _token_validator is not None:
        return _token_validator

    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET must be set in environment")

    _token_validator = TokenValidator(
        secret=secret,
        expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24 * 7))),
    )
    return _token_validator


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    dynamodb_resource = get_dynamodb_resource()
    menu_repository = get_menu_repository()
    order_repository = OrderRepository(
        dynamodb_resource=dynamodb_resource,
        table_name=os.getenv("DYNAMODB_ORDERS_TABLE", "restaurant-orders"),
    )
    user_repository = UserRepository(
        dynamodb_resource=dynamodb_resource,
        table_name=os.getenv("DYNAMODB_USERS_TABLE", "restaurant-users"),
    )
    token_validator = get_token_validator()

    enforce = os.getenv("ENFORCE_STATUS_TRANSITIONS", "false").strip().lower() in ("1", "true", "yes")
    origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()]

    _fastapi_app = create_app(
        menu_service=MenuService(menu_repository=menu_repository),
        order_service=OrderService(
            order_repository=order_repository,
            menu_repository=menu_repository,
            enforce_status_transitions=enforce,
        ),
        auth_service=AuthService(user_repository=user_repository, token_validator=token_validator),
        token_validator=token_validator,
        cors_origins=origins,
    )

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Initialize Lambda environment with structured logging.

    Should be called once during Lambda cold start.
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Lambda environment initialized")
