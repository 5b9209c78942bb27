"""Local entry point: `uvicorn main:app` or `python src/main.py`.

Builds the ordering API from environment settings. For AWS Lambda see
lambda_handler.py.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from restaurant_ordering_service.auth.token_validator import TokenValidator
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.observability import configure_logging, setup_observability
from restaurant_ordering_service.repositories.menu_repository import MenuItemRepository
from restaurant_ordering_service.repositories.order_repository import OrderRepository
from restaurant_ordering_service.repositories.user_repository import UserRepository
from restaurant_ordering_service.services.auth_service import AuthService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-secret-change-me"


def get_dynamodb_resource() -> Any:
    """Return a boto3 DynamoDB resource.

    DYNAMODB_ENDPOINT points at DynamoDB Local; it accepts any credentials,
    so placeholders are used when none are exported.
    """
    region = os.getenv("AWS_REGION", "us-east-1")
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    if not endpoint_url:
        logger.info(f"Using AWS DynamoDB in region {region}")
        return boto3.resource("dynamodb", region_name=region)

    logger.info(f"Using local DynamoDB at {endpoint_url}")
    return boto3.resource(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=region,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "dummy"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "dummy"),
    )


def get_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def get_cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:5173,http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_token_validator() -> TokenValidator:
    """Create the bearer token validator from environment settings.

    Raises:
        ValueError: If JWT_SECRET is missing outside development
    """
    secret = os.getenv("JWT_SECRET")
    if not secret:
        if os.getenv("ENVIRONMENT", "development") == "production":
            raise ValueError("JWT_SECRET must be set in production")
        logger.warning("JWT_SECRET not configured - using development secret")
        secret = DEV_JWT_SECRET

    expires_minutes = int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24 * 7)))
    return TokenValidator(secret=secret, expires_minutes=expires_minutes)


def create_application() -> FastAPI:
    """Build the API over DynamoDB using settings from the environment.

    Table names come from DYNAMODB_MENU_TABLE, DYNAMODB_ORDERS_TABLE and
    DYNAMODB_USERS_TABLE. The menu repository is shared by the menu and
    order services. OpenTelemetry is set up unless ENABLE_TRACING is false.
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing restaurant ordering service...")

    dynamodb_resource = get_dynamodb_resource()

    menu_table = os.getenv("DYNAMODB_MENU_TABLE", "restaurant-menu-items")
    orders_table = os.getenv("DYNAMODB_ORDERS_TABLE", "restaurant-orders")
    users_table = os.getenv("DYNAMODB_USERS_TABLE", "restaurant-users")

    menu_repository = MenuItemRepository(dynamodb_resource=dynamodb_resource, table_name=menu_table)
    order_repository = OrderRepository(dynamodb_resource=dynamodb_resource, table_name=orders_table)
    user_repository = UserRepository(dynamodb_resource=dynamodb_resource, table_name=users_table)

    logger.info(
        f"Repositories configured - menu: {menu_table}, orders: {orders_table}, users: {users_table}"
    )

    token_validator = create_token_validator()
    enforce_transitions = get_flag("ENFORCE_STATUS_TRANSITIONS")

    menu_service = MenuService(menu_repository=menu_repository)
    order_service = OrderService(
        order_repository=order_repository,
        menu_repository=menu_repository,
        enforce_status_transitions=enforce_transitions,
    )
    auth_service = AuthService(user_repository=user_repository, token_validator=token_validator)

    logger.info(f"Services initialized (status transitions enforced: {enforce_transitions})")

    app = create_app(
        menu_service=menu_service,
        order_service=order_service,
        auth_service=auth_service,
        token_validator=token_validator,
        cors_origins=get_cors_origins(),
    )

    if get_flag("ENABLE_TRACING", "true"):
        setup_observability(app)

    logger.info("Restaurant ordering service initialized successfully")

    return app


app = create_application() if os.getenv("ENVIRONMENT") != "test" else FastAPI()


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Serving on http://{host}:{port} (docs at /docs)")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
