"""Order engine: order creation, totals, and status-gated mutation."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from restaurant_ordering_service.exceptions import (
    BusinessRuleViolation,
    InvalidInputError,
    NotFoundError,
)
from restaurant_ordering_service.models.menu_models import MenuItemSnapshot
from restaurant_ordering_service.models.order_models import (
    MAX_LINE_QUANTITY,
    Order,
    OrderLine,
    OrderLineRequest,
    OrderLineView,
    OrderStatus,
    OrderView,
    compute_total,
)
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.observability.metrics import (
    record_order_created,
    record_order_mutation,
    record_order_rejected,
)
from restaurant_ordering_service.repositories.menu_repository import MenuItemRepository
from restaurant_ordering_service.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "Order not found"
LINE_NOT_FOUND = "Order item not found"


@dataclass
class LineRemovalResult:
    """Outcome of removing a line from an order.

    Attributes:
        order: The updated order, None when the order was deleted
        order_deleted: True if the removed line was the last one
    """

    order: OrderView | None
    order_deleted: bool = False


class OrderService:
    """Service owning the order lifecycle.

    Orders are created from a cart selection with prices frozen from the
    catalog, and may only have their lines changed while pending. The stored
    total is always recomputed from every line after a change.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        menu_repository: MenuItemRepository,
        enforce_status_transitions: bool = False,
    ) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for orders
            menu_repository: Read-only access to the catalog
            enforce_status_transitions: Reject status moves outside the kitchen
                workflow instead of accepting any known status
        """
        self.order_repository = order_repository
        self.menu_repository = menu_repository
        self.enforce_status_transitions = enforce_status_transitions

    @traced("order.create")
    async def create_order(self, user_id: str, lines: list[OrderLineRequest]) -> OrderView:
        """Place an order from cart lines.

        Lines are resolved in submitted order against the current catalog.
        Repeated menu item ids stay separate lines. Nothing is written unless
        every line resolves.

        Args:
            user_id: Owner from the authentication gate
            lines: Requested (menu item, quantity) pairs

        Returns:
            The created order with menu item snapshots

        Raises:
            InvalidInputError: If there are no lines, an item is missing or
                unavailable, or a quantity is below 1
        """
        if not lines:
            record_order_rejected("empty")
            raise InvalidInputError("Order items are required")

        catalog = self.menu_repository.get_items([line.menu_item_id for line in lines])

        order_lines: list[OrderLine] = []
        for requested in lines:
            if not 1 <= requested.quantity <= MAX_LINE_QUANTITY:
                record_order_rejected("quantity")
                raise InvalidInputError("Valid quantity is required")

            menu_item = catalog.get(requested.menu_item_id)
            if menu_item is None:
                record_order_rejected("not_found")
                raise InvalidInputError(f"Menu item not found: {requested.menu_item_id}")

            if not menu_item.is_available:
                record_order_rejected("unavailable")
                raise InvalidInputError(f"Menu item not available: {menu_item.name}")

            order_lines.append(
                OrderLine(
                    id=f"line_{uuid.uuid4().hex[:12]}",
                    menu_item_id=menu_item.id,
                    quantity=requested.quantity,
                    price=menu_item.price,
                )
            )

        now = datetime.now(UTC)
        order = Order(
            id=f"ord_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            items=order_lines,
            total_amount=compute_total(order_lines),
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        self.order_repository.create_order(order)
        record_order_created(len(order_lines), order.total_amount)
        logger.info(
            f"Created order {order.id} for user {user_id}: "
            f"{len(order_lines)} lines, total {order.total_amount}"
        )

        return self._expand(order, catalog)

    @traced("order.list")
    async def list_orders(self, user_id: str) -> list[OrderView]:
        """List a user's orders, newest first."""
        orders = self.order_repository.list_orders_for_user(user_id)
        catalog = self.menu_repository.get_items(
            [line.menu_item_id for order in orders for line in order.items]
        )
        return [self._expand(order, catalog) for order in orders]

    @traced("order.get")
    async def get_order(self, user_id: str, order_id: str) -> OrderView:
        """Get one of the user's orders.

        Raises:
            NotFoundError: If the order does not exist for this user
        """
        return self._expand_with_catalog(self._load(user_id, order_id))

    @traced("order.update_status")
    async def update_status(self, user_id: str, order_id: str, status: str) -> OrderView:
        """Set an order's status.

        Any known status may follow any other unless transition enforcement
        is switched on.

        Args:
            user_id: Owner from the authentication gate
            order_id: Order to update
            status: Requested status value

        Raises:
            InvalidInputError: If status is not a known value
            NotFoundError: If the order does not exist for this user
            BusinessRuleViolation: If enforcement is on and the move is not allowed
        """
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise InvalidInputError("Invalid status") from None

        order = self._load(user_id, order_id)

        if self.enforce_status_transitions and not order.status.can_transition_to(new_status):
            raise BusinessRuleViolation(
                f"Cannot change order status from {order.status.value} to {new_status.value}"
            )

        previous = order.status
        order.status = new_status
        order.updated_at = datetime.now(UTC)
        self.order_repository.save_order(order)

        record_order_mutation("status")
        logger.info(f"Order {order_id} status {previous.value} -> {new_status.value}")
        return self._expand_with_catalog(order)

    @traced("order.update_line_quantity")
    async def update_line_quantity(
        self, user_id: str, order_id: str, line_id: str, quantity: int
    ) -> OrderView:
        """Change the quantity of one line of a pending order.

        Raises:
            InvalidInputError: If quantity is below 1
            NotFoundError: If the order or line does not exist
            BusinessRuleViolation: If the order is no longer pending
        """
        if not 1 <= quantity <= MAX_LINE_QUANTITY:
            raise InvalidInputError("Valid quantity is required")

        order = self._load_pending(user_id, order_id)
        line = order.find_line(line_id)
        if line is None:
            raise NotFoundError(LINE_NOT_FOUND)

        line.quantity = quantity
        order.recompute_total()
        order.updated_at = datetime.now(UTC)
        self.order_repository.save_order(order)

        record_order_mutation("quantity")
        logger.info(f"Order {order_id} line {line_id} quantity set to {quantity}")
        return self._expand_with_catalog(order)

    @traced("order.remove_line")
    async def remove_line(self, user_id: str, order_id: str, line_id: str) -> LineRemovalResult:
        """Remove one line from a pending order.

        Removing the last line deletes the order; an order is never stored
        without lines.

        Raises:
            NotFoundError: If the order or line does not exist
            BusinessRuleViolation: If the order is no longer pending
        """
        order = self._load_pending(user_id, order_id)
        line = order.find_line(line_id)
        if line is None:
            raise NotFoundError(LINE_NOT_FOUND)

        remaining = [existing for existing in order.items if existing.id != line_id]

        if not remaining:
            self.order_repository.delete_order(user_id, order_id, expected_version=order.version)
            record_order_mutation("delete")
            logger.info(f"Order {order_id} deleted after removing its last line")
            return LineRemovalResult(order=None, order_deleted=True)

        order.items = remaining
        order.recompute_total()
        order.updated_at = datetime.now(UTC)
        self.order_repository.save_order(order)

        record_order_mutation("remove_line")
        logger.info(f"Removed line {line_id} from order {order_id}")
        return LineRemovalResult(order=self._expand_with_catalog(order))

    @traced("order.delete")
    async def delete_order(self, user_id: str, order_id: str) -> None:
        """Delete one of the user's orders regardless of status.

        Raises:
            NotFoundError: If the order does not exist for this user
        """
        if not self.order_repository.delete_order(user_id, order_id):
            raise NotFoundError(ORDER_NOT_FOUND)

        record_order_mutation("delete")
        logger.info(f"Deleted order {order_id} for user {user_id}")

    def _load(self, user_id: str, order_id: str) -> Order:
        order = self.order_repository.get_order(user_id, order_id)
        if order is None:
            raise NotFoundError(ORDER_NOT_FOUND)
        return order

    def _load_pending(self, user_id: str, order_id: str) -> Order:
        order = self._load(user_id, order_id)
        if order.status != OrderStatus.PENDING:
            raise BusinessRuleViolation("Cannot modify confirmed orders")
        return order

    def _expand_with_catalog(self, order: Order) -> OrderView:
        catalog = self.menu_repository.get_items([line.menu_item_id for line in order.items])
        return self._expand(order, catalog)

    @staticmethod
    def _expand(order: Order, catalog: dict) -> OrderView:
        """Join menu item snapshots into an order for display.

        Args:
            order: Stored order
            catalog: Menu items keyed by id

        Returns:
            OrderView: Order with per-line snapshots (None for deleted items)
        """
        lines = []
        for line in order.items:
            menu_item = catalog.get(line.menu_item_id)
            lines.append(
                OrderLineView(
                    id=line.id,
                    menu_item=MenuItemSnapshot.from_menu_item(menu_item) if menu_item else None,
                    menu_item_id=line.menu_item_id,
                    quantity=line.quantity,
                    price=line.price,
                )
            )

        return OrderView(
            id=order.id,
            user_id=order.user_id,
            items=lines,
            total_amount=order.total_amount,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
