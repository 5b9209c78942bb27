"""DynamoDB repository for the menu catalog.

Expected misses are reported with simple return values (None/False). Storage
failures are logged and raised as PersistenceError so the API can answer 500
instead of mistaking an outage for a missing item.
"""

import logging
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.exceptions import PersistenceError
from restaurant_ordering_service.models.menu_models import MenuItem

logger = logging.getLogger(__name__)

# DynamoDB BatchGetItem limit
BATCH_GET_LIMIT = 100


class MenuItemRepository:
    """Repository for menu item CRUD operations.

    Manages menu item records in DynamoDB with id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_item(self, item_id: str) -> MenuItem | None:
        """Retrieve a menu item by ID.

        Args:
            item_id: Menu item identifier

        Returns:
            MenuItem if found, None otherwise

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        try:
            response = self.table.get_item(Key={"id": item_id})
        except ClientError as e:
            logger.error(f"Failed to get menu item {item_id}: {e}")
            raise PersistenceError("Error fetching menu item") from e

        if "Item" not in response:
            return None

        return MenuItem.from_dynamodb_item(response["Item"])

    def get_items(self, item_ids: list[str]) -> dict[str, MenuItem]:
        """Fetch several menu items in batches.

        Args:
            item_ids: Menu item identifiers (duplicates allowed)

        Returns:
            dict: Found items keyed by id; missing ids are simply absent

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        unique_ids = list(dict.fromkeys(item_ids))
        found: dict[str, MenuItem] = {}

        for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
            chunk = unique_ids[start : start + BATCH_GET_LIMIT]
            request: dict[str, Any] = {self.table_name: {"Keys": [{"id": i} for i in chunk]}}

            try:
                while request:
                    response = self.dynamodb.batch_get_item(RequestItems=request)
                    for raw in response.get("Responses", {}).get(self.table_name, []):
                        item = MenuItem.from_dynamodb_item(raw)
                        found[item.id] = item
                    request = response.get("UnprocessedKeys") or {}
            except ClientError as e:
                logger.error(f"Failed to batch get menu items: {e}")
                raise PersistenceError("Error fetching menu items") from e

        return found

    def list_available(self) -> list[MenuItem]:
        """List every available menu item, most recently created first.

        Returns:
            list: Available MenuItem objects (empty list if none)

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        scan_kwargs: dict[str, Any] = {"FilterExpression": Attr("is_available").eq(True)}
        items: list[MenuItem] = []

        try:
            while True:
                response = self.table.scan(**scan_kwargs)
                items.extend(MenuItem.from_dynamodb_item(i) for i in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error(f"Failed to list menu items: {e}")
            raise PersistenceError("Error fetching menu items") from e

        items.sort(key=lambda item: item.created_at, reverse=True)
        return items

    def save_item(self, item: MenuItem) -> None:
        """Create or replace a menu item.

        Args:
            item: MenuItem to save

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        try:
            self.table.put_item(Item=item.to_dynamodb_item())
        except ClientError as e:
            logger.error(f"Failed to save menu item {item.id}: {e}")
            raise PersistenceError("Error saving menu item") from e

    def delete_item(self, item_id: str) -> bool:
        """Delete a menu item.

        Args:
            item_id: Menu item identifier

        Returns:
            bool: True if an item was deleted, False if it did not exist

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        try:
            response = self.table.delete_item(Key={"id": item_id}, ReturnValues="ALL_OLD")
        except ClientError as e:
            logger.error(f"Failed to delete menu item {item_id}: {e}")
            raise PersistenceError("Error deleting menu item") from e

        return "Attributes" in response
