"""Per-session client state.

A ClientSession is created per signed-in user and passed to whatever needs
it. It is populated on login or registration and cleared on logout.
"""

from dataclasses import dataclass, field

from restaurant_ordering_service.models.user_models import PublicUser


@dataclass
class Cart:
    """Menu item quantities collected before an order is placed."""

    quantities: dict[str, int] = field(default_factory=dict)

    def add(self, menu_item_id: str, quantity: int = 1) -> int:
        """Add units of an item and return the new quantity."""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        self.quantities[menu_item_id] = self.quantities.get(menu_item_id, 0) + quantity
        return self.quantities[menu_item_id]

    def remove(self, menu_item_id: str, quantity: int = 1) -> int:
        """Take units of an item out, never going below zero."""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        remaining = max(self.quantities.get(menu_item_id, 0) - quantity, 0)
        if remaining:
            self.quantities[menu_item_id] = remaining
        else:
            self.quantities.pop(menu_item_id, None)
        return remaining

    def quantity_of(self, menu_item_id: str) -> int:
        return self.quantities.get(menu_item_id, 0)

    @property
    def is_empty(self) -> bool:
        return not any(q > 0 for q in self.quantities.values())

    def to_order_lines(self) -> list[dict[str, str | int]]:
        """Build the POST /orders items payload, in insertion order."""
        return [
            {"menuItemId": item_id, "quantity": quantity}
            for item_id, quantity in self.quantities.items()
            if quantity > 0
        ]

    def clear(self) -> None:
        self.quantities.clear()


@dataclass
class ClientSession:
    """Authentication and cart state for one signed-in user."""

    token: str | None = None
    user: PublicUser | None = None
    cart: Cart = field(default_factory=Cart)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def start(self, user: PublicUser, token: str) -> None:
        """Record a successful login or registration."""
        self.user = user
        self.token = token

    def end(self) -> None:
        """Forget the token, the user and the cart."""
        self.token = None
        self.user = None
        self.cart.clear()

    def auth_headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
