"""DynamoDB repository for orders.

Orders are keyed by (user_id, order_id). Because the owner is part of the
key, a lookup with the wrong owner is indistinguishable from a missing order.
"""

import logging

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.exceptions import ConcurrentModificationError, PersistenceError
from restaurant_ordering_service.models.order_models import Order

logger = logging.getLogger(__name__)


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class OrderRepository:
    """Repository for order CRUD operations.

    Writes are guarded by the order's version stamp: a save only succeeds if
    the stored version is the one the caller read.
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

    def get_order(self, user_id: str, order_id: str) -> Order | None:
        """Retrieve an order owned by a user.

        Args:
            user_id: Owner identifier
            order_id: Order identifier

        Returns:
            Order if found for this owner, None otherwise

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        try:
            response = self.table.get_item(Key={"user_id": user_id, "order_id": order_id})
        except ClientError as e:
            logger.error(f"Failed to get order {order_id}: {e}")
            raise PersistenceError("Error fetching order") from e

        if "Item" not in response:
            return None

        return Order.from_dynamodb_item(response["Item"])

    def list_orders_for_user(self, user_id: str) -> list[Order]:
        """List all orders for a user, most recently created first.

        Args:
            user_id: Owner identifier

        Returns:
            list: Order objects (empty list if none found)

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        query_kwargs: dict = {"KeyConditionExpression": Key("user_id").eq(user_id)}
        orders: list[Order] = []

        try:
            while True:
                response = self.table.query(**query_kwargs)
                orders.extend(Order.from_dynamodb_item(i) for i in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error(f"Failed to list orders for user {user_id}: {e}")
            raise PersistenceError("Error fetching orders") from e

        orders.sort(key=lambda order: order.created_at, reverse=True)
        return orders

    def create_order(self, order: Order) -> None:
        """Insert a new order.

        Args:
            order: Order to insert (version 1)

        Raises:
            ConcurrentModificationError: If an order with this key already exists
            PersistenceError: If DynamoDB rejects the request
        """
        try:
            self.table.put_item(
                Item=order.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(order_id)",
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise ConcurrentModificationError(f"Order {order.id} already exists") from e
            logger.error(f"Failed to create order {order.id}: {e}")
            raise PersistenceError("Error creating order") from e

    def save_order(self, order: Order) -> None:
        """Replace an existing order, bumping its version.

        The write is conditional on the stored version still matching the
        version the order was read at. On success ``order.version`` is
        incremented in place.

        Args:
            order: Order previously read from this repository

        Raises:
            ConcurrentModificationError: If the order changed or vanished since it was read
            PersistenceError: If DynamoDB rejects the request
        """
        expected_version = order.version
        item = order.to_dynamodb_item()
        item["version"] = expected_version + 1

        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="#version = :expected",
                ExpressionAttributeNames={"#version": "version"},
                ExpressionAttributeValues={":expected": expected_version},
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                logger.warning(f"Version conflict saving order {order.id} at v{expected_version}")
                raise ConcurrentModificationError(
                    "Order was modified by another request, reload and retry"
                ) from e
            logger.error(f"Failed to save order {order.id}: {e}")
            raise PersistenceError("Error saving order") from e

        order.version = expected_version + 1

    def delete_order(
        self, user_id: str, order_id: str, expected_version: int | None = None
    ) -> bool:
        """Delete an order owned by a user.

        Args:
            user_id: Owner identifier
            order_id: Order identifier
            expected_version: When given, only delete if the stored order is
                still at this version

        Returns:
            bool: True if an order was deleted, False if none existed for this owner

        Raises:
            ConcurrentModificationError: If expected_version no longer matches
            PersistenceError: If DynamoDB rejects the request
        """
        request: dict = {
            "Key": {"user_id": user_id, "order_id": order_id},
            "ReturnValues": "ALL_OLD",
        }
        if expected_version is not None:
            request.update(
                ConditionExpression="#version = :expected",
                ExpressionAttributeNames={"#version": "version"},
                ExpressionAttributeValues={":expected": expected_version},
            )

        try:
            response = self.table.delete_item(**request)
        except ClientError as e:
            if expected_version is not None and _is_conditional_failure(e):
                logger.warning(f"Version conflict deleting order {order_id} at v{expected_version}")
                raise ConcurrentModificationError(
                    "Order was modified by another request, reload and retry"
                ) from e
            logger.error(f"Failed to delete order {order_id}: {e}")
            raise PersistenceError("Error deleting order") from e

        return "Attributes" in response
