"""Create the DynamoDB tables and load the sample menu.

Run from project root against DynamoDB Local:
    DYNAMODB_ENDPOINT=http://localhost:8000 python scripts/seed_menu.py --create-tables
"""

import argparse
import logging
import os
import sys
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from botocore.exceptions import ClientError  # noqa: E402

from lambda_dependencies import get_dynamodb_resource  # noqa: E402
from restaurant_ordering_service.models.menu_models import MenuCategory, MenuItem  # noqa: E402
from restaurant_ordering_service.observability import configure_logging  # noqa: E402
from restaurant_ordering_service.repositories.menu_repository import MenuItemRepository  # noqa: E402

logger = logging.getLogger("seed_menu")

SAMPLE_MENU: list[dict[str, Any]] = [
    {
        "name": "Classic Margherita Pizza",
        "description": "Fresh mozzarella, tomato sauce, and basil on a crispy crust",
        "price": "14.99",
        "category": "mains",
        "image_url": "https://images.pexels.com/photos/315755/pexels-photo-315755.jpeg",
    },
    {
        "name": "Caesar Salad",
        "description": "Crisp romaine lettuce with parmesan cheese and croutons",
        "price": "9.99",
        "category": "salads",
        "image_url": "https://images.pexels.com/photos/1059905/pexels-photo-1059905.jpeg",
    },
    {
        "name": "Grilled Salmon",
        "description": "Fresh Atlantic salmon with lemon herb seasoning",
        "price": "22.99",
        "category": "mains",
        "image_url": "https://images.pexels.com/photos/725991/pexels-photo-725991.jpeg",
    },
    {
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with molten center and vanilla ice cream",
        "price": "7.99",
        "category": "desserts",
        "image_url": "https://images.pexels.com/photos/291528/pexels-photo-291528.jpeg",
    },
    {
        "name": "Chicken Wings",
        "description": "Crispy buffalo wings served with celery and blue cheese",
        "price": "11.99",
        "category": "appetizers",
        "image_url": "https://images.pexels.com/photos/60616/fried-chicken-chicken-fried-crunchy-60616.jpeg",
    },
    {
        "name": "Fresh Orange Juice",
        "description": "Freshly squeezed orange juice",
        "price": "4.99",
        "category": "beverages",
        "image_url": "https://images.pexels.com/photos/96974/pexels-photo-96974.jpeg",
    },
    {
        "name": "Tomato Basil Soup",
        "description": "Creamy tomato soup with fresh basil and herbs",
        "price": "6.99",
        "category": "soups",
        "image_url": "https://images.pexels.com/photos/539451/pexels-photo-539451.jpeg",
    },
    {
        "name": "Beef Burger",
        "description": "Juicy beef patty with lettuce, tomato, and special sauce",
        "price": "16.99",
        "category": "mains",
        "image_url": "https://images.pexels.com/photos/1639557/pexels-photo-1639557.jpeg",
    },
]


def table_definitions(menu_table: str, orders_table: str, users_table: str) -> list[dict[str, Any]]:
    """Key schemas for the three service tables."""
    return [
        {
            "TableName": menu_table,
            "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
            "AttributeDefinitions": [{"AttributeName": "id", "AttributeType": "S"}],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": orders_table,
            "KeySchema": [
                {"AttributeName": "user_id", "KeyType": "HASH"},
                {"AttributeName": "order_id", "KeyType": "RANGE"},
            ],
            "AttributeDefinitions": [
                {"AttributeName": "user_id", "AttributeType": "S"},
                {"AttributeName": "order_id", "AttributeType": "S"},
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": users_table,
            "KeySchema": [{"AttributeName": "email", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": "email", "AttributeType": "S"},
                {"AttributeName": "user_id", "AttributeType": "S"},
            ],
            "GlobalSecondaryIndexes": [
                {
                    "IndexName": "user_id-index",
                    "KeySchema": [{"AttributeName": "user_id", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
    ]


def create_tables(dynamodb_resource: Any, definitions: list[dict[str, Any]]) -> list[str]:
    """Create any tables that do not exist yet.

    Returns:
        Names of the tables that were created
    """
    created = []
    for definition in definitions:
        try:
            table = dynamodb_resource.create_table(**definition)
            table.wait_until_exists()
            created.append(definition["TableName"])
            logger.info(f"Created table {definition['TableName']}")
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ResourceInUseException":
                raise
            logger.info(f"Table {definition['TableName']} already exists")
    return created


def build_sample_items(now: datetime | None = None) -> list[MenuItem]:
    """Build MenuItem documents for the sample menu.

    Creation times are staggered so the menu lists in the order above.
    """
    now = now or datetime.now(UTC)
    items = []
    for offset, entry in enumerate(SAMPLE_MENU):
        created = now - timedelta(seconds=offset)
        items.append(
            MenuItem(
                id=f"item_{uuid.uuid4().hex[:12]}",
                name=entry["name"],
                description=entry["description"],
                price=Decimal(entry["price"]),
                category=MenuCategory.parse(entry["category"]),
                is_available=True,
                image_url=entry["image_url"],
                created_at=created,
                updated_at=created,
            )
        )
    return items


def clear_menu(repository: MenuItemRepository) -> int:
    """Delete every menu item, available or not."""
    deleted = 0
    scan_kwargs: dict[str, Any] = {"ProjectionExpression": "id"}
    while True:
        response = repository.table.scan(**scan_kwargs)
        for raw in response.get("Items", []):
            if repository.delete_item(raw["id"]):
                deleted += 1
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return deleted
        scan_kwargs["ExclusiveStartKey"] = last_key


def seed_menu(repository: MenuItemRepository, replace: bool = True) -> list[MenuItem]:
    """Write the sample menu, optionally clearing existing items first."""
    if replace:
        logger.info(f"Cleared {clear_menu(repository)} existing menu items")

    items = build_sample_items()
    for item in items:
        repository.save_item(item)

    logger.info(f"Inserted {len(items)} sample menu items")
    return items


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the restaurant menu")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    parser.add_argument("--keep-existing", action="store_true", help="Do not clear the menu first")
    args = parser.parse_args()

    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    menu_table = os.getenv("DYNAMODB_MENU_TABLE", "restaurant-menu-items")
    dynamodb_resource = get_dynamodb_resource()

    if args.create_tables:
        create_tables(
            dynamodb_resource,
            table_definitions(
                menu_table,
                os.getenv("DYNAMODB_ORDERS_TABLE", "restaurant-orders"),
                os.getenv("DYNAMODB_USERS_TABLE", "restaurant-users"),
            ),
        )

    repository = MenuItemRepository(dynamodb_resource=dynamodb_resource, table_name=menu_table)
    seed_menu(repository, replace=not args.keep_existing)
    logger.info("Database seeded successfully")


if __name__ == "__main__":
    main()
