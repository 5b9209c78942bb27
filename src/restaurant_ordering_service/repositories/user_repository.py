"""DynamoDB repository for user accounts."""

import logging

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.exceptions import PersistenceError
from restaurant_ordering_service.models.user_models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user records.

    Users are keyed by email. A Global Secondary Index on user_id serves
    lookups by the id carried in access tokens.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_by_email(self, email: str) -> User | None:
        try:
            response = self.table.get_item(Key={"email": email})
        except ClientError as e:
            logger.error(f"Failed to get user by email: {e}")
            raise PersistenceError("Error fetching user") from e

        if "Item" not in response:
            return None

        return User.from_dynamodb_item(response["Item"])

    def get_by_id(self, user_id: str) -> User | None:
        try:
            response = self.table.query(
                IndexName="user_id-index",
                KeyConditionExpression=Key("user_id").eq(user_id),
                Limit=1,
            )
        except ClientError as e:
            logger.error(f"Failed to get user {user_id}: {e}")
            raise PersistenceError("Error fetching user") from e

        items = response.get("Items", [])
        if not items:
            return None

        return User.from_dynamodb_item(items[0])

    def create_user(self, user: User) -> bool:
        """Insert a user unless the email is taken.

        Args:
            user: User to insert

        Returns:
            bool: True if inserted, False if a user with this email exists

        Raises:
            PersistenceError: If DynamoDB rejects the request
        """
        try:
            self.table.put_item(
                Item=user.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(email)",
            )
            return True

        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return False
            logger.error(f"Failed to create user: {e}")
            raise PersistenceError("Error creating user") from e
