"""Order models.

``Order`` and ``OrderLine`` are the stored documents owned by the order
engine. ``OrderView`` is what the API returns: the same order with each line's
menu item expanded into a display snapshot.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import Field

from restaurant_ordering_service.models.menu_models import CamelModel, MenuItemSnapshot, Money

MAX_LINE_QUANTITY = 999


class OrderStatus(str, Enum):
    """Enumeration of order status values."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_transition_to(self, target: "OrderStatus") -> bool:
        """Check a move against the directed kitchen workflow.

        pending -> confirmed -> preparing -> ready -> delivered, with
        cancelled reachable from any non-terminal state. Re-applying the
        current status is always allowed.

        Args:
            target: The requested next status

        Returns:
            bool: True if the transition follows the workflow
        """
        if target == self:
            return True
        if self.is_terminal:
            return False
        if target == OrderStatus.CANCELLED:
            return True
        return _NEXT_STATUS.get(self) == target


_NEXT_STATUS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
}


class OrderLine(CamelModel):
    """One (menu item, quantity, frozen price) entry of an order."""

    id: str = Field(..., description="Unique line identifier")
    menu_item_id: str = Field(..., description="Referenced menu item")
    quantity: int = Field(..., ge=1, description="Number of units ordered")
    price: Money = Field(..., ge=0, description="Unit price frozen at order creation")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dynamodb_item(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "menu_item_id": self.menu_item_id,
            "quantity": self.quantity,
            "price": self.price,
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "OrderLine":
        return cls(
            id=item["id"],
            menu_item_id=item["menu_item_id"],
            quantity=int(item["quantity"]),
            price=Decimal(str(item["price"])),
        )


def compute_total(lines: list[OrderLine]) -> Decimal:
    """Sum price * quantity over all lines.

    Args:
        lines: Order lines to total

    Returns:
        Decimal: The order total (0 for no lines)
    """
    return sum((line.line_total for line in lines), Decimal("0"))


class Order(CamelModel):
    """Order document.

    Stored in DynamoDB with (user_id, id) as composite key, so every lookup
    is scoped to the owner.
    """

    id: str = Field(..., description="Unique order identifier")
    user_id: str = Field(..., description="Owning user")
    items: list[OrderLine] = Field(..., min_length=1, description="Order lines in submitted order")
    total_amount: Money = Field(..., ge=0, description="Sum of line price * quantity")
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="Current order status")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    version: int = Field(default=1, ge=1, description="Optimistic concurrency stamp")

    def find_line(self, line_id: str) -> OrderLine | None:
        for line in self.items:
            if line.id == line_id:
                return line
        return None

    def recompute_total(self) -> None:
        """Recalculate total_amount from every line."""
        self.total_amount = compute_total(self.items)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "user_id": self.user_id,
            "order_id": self.id,
            "items": [line.to_dynamodb_item() for line in self.items],
            "total_amount": self.total_amount,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "version": self.version,
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=item["order_id"],
            user_id=item["user_id"],
            items=[OrderLine.from_dynamodb_item(line) for line in item.get("items", [])],
            total_amount=Decimal(str(item["total_amount"])),
            status=OrderStatus(item["status"]),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
            version=int(item.get("version", 1)),
        )


class OrderLineView(CamelModel):
    """Order line with its menu item expanded for display."""

    id: str
    menu_item: MenuItemSnapshot | None = Field(
        None, description="Menu item snapshot, None if the item was deleted"
    )
    menu_item_id: str
    quantity: int
    price: Money


class OrderView(CamelModel):
    """Order as returned to clients."""

    id: str
    user_id: str
    items: list[OrderLineView]
    total_amount: Money
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class OrderLineRequest(CamelModel):
    """One cart entry submitted for ordering."""

    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)


class CreateOrderRequest(CamelModel):
    """Body of POST /orders."""

    items: list[OrderLineRequest] = Field(default_factory=list)


class OrderStatusUpdate(CamelModel):
    """Body of PUT /orders/{id}/status.

    Kept as a plain string so unknown values reach the service and are
    rejected with the service's own message.
    """

    status: str


class LineQuantityUpdate(CamelModel):
    """Body of PUT /orders/{order_id}/items/{line_id}."""

    quantity: int


class CreateOrderResponse(CamelModel):
    message: str
    order: OrderView


class OrderDeletedResponse(CamelModel):
    message: str
    order_deleted: bool = True
