"""Custom metrics for the ordering service."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("ordering-svc")

orders_created_counter = meter.create_counter(
    name="orders_created_total",
    description="Total number of orders placed",
    unit="1",
)

order_rejected_counter = meter.create_counter(
    name="order_requests_rejected_total",
    description="Order creation requests rejected during validation, by reason",
    unit="1",
)

order_value_histogram = meter.create_histogram(
    name="order_total_amount",
    description="Total amount of placed orders",
    unit="USD",
)

order_mutation_counter = meter.create_counter(
    name="order_mutations_total",
    description="Order changes after creation, by operation",
    unit="1",
)

menu_write_counter = meter.create_counter(
    name="menu_item_writes_total",
    description="Menu catalog writes, by operation",
    unit="1",
)


def record_order_created(line_count: int, total_amount: Decimal) -> None:
    """Record a placed order.

    Args:
        line_count: Number of lines in the order
        total_amount: Order total
    """
    orders_created_counter.add(1, {"line_count": line_count})
    order_value_histogram.record(float(total_amount))


def record_order_rejected(reason: str) -> None:
    """Record an order request that failed validation.

    Args:
        reason: Short reason tag (e.g. "empty", "not_found", "unavailable")
    """
    order_rejected_counter.add(1, {"reason": reason})


def record_order_mutation(operation: str) -> None:
    """Record a change to an existing order.

    Args:
        operation: One of "status", "quantity", "remove_line", "delete"
    """
    order_mutation_counter.add(1, {"operation": operation})


def record_menu_write(operation: str) -> None:
    menu_write_counter.add(1, {"operation": operation})
