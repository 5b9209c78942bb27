"""Menu catalog service."""

import logging
import uuid
from datetime import UTC, datetime

from restaurant_ordering_service.exceptions import InvalidInputError, NotFoundError
from restaurant_ordering_service.models.menu_models import MenuItem, MenuItemCreate, MenuItemUpdate
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.observability.metrics import record_menu_write
from restaurant_ordering_service.repositories.menu_repository import MenuItemRepository

logger = logging.getLogger(__name__)


class MenuService:
    """Service for browsing and managing the menu catalog.

    Catalog writes never touch orders: orders keep the price that was
    current when they were placed.
    """

    def __init__(self, menu_repository: MenuItemRepository) -> None:
        """Initialize the MenuService.

        Args:
            menu_repository: Repository for menu items
        """
        self.menu_repository = menu_repository

    @traced("menu.list")
    async def list_menu(self) -> list[MenuItem]:
        """List available menu items, newest first."""
        return self.menu_repository.list_available()

    @traced("menu.get")
    async def get_menu_item(self, item_id: str) -> MenuItem:
        """Get a single menu item, available or not.

        Raises:
            NotFoundError: If no item has this id
        """
        item = self.menu_repository.get_item(item_id)
        if item is None:
            raise NotFoundError("Menu item not found")
        return item

    @traced("menu.create")
    async def create_menu_item(self, payload: MenuItemCreate) -> MenuItem:
        """Create a new, available menu item.

        Args:
            payload: Validated item fields

        Returns:
            The stored MenuItem
        """
        now = datetime.now(UTC)
        item = MenuItem(
            id=f"item_{uuid.uuid4().hex[:12]}",
            name=payload.name,
            description=payload.description.strip(),
            price=payload.price,
            category=payload.category,
            is_available=True,
            image_url=payload.image_url or None,
            created_at=now,
            updated_at=now,
        )

        self.menu_repository.save_item(item)
        record_menu_write("create")
        logger.info(f"Created menu item {item.id} ({item.name}) in {item.category.value}")
        return item

    @traced("menu.update")
    async def update_menu_item(self, item_id: str, payload: MenuItemUpdate) -> MenuItem:
        """Apply the supplied fields to an existing item.

        Fields that were not sent keep their stored value. An explicit null
        is only meaningful for image_url, which it clears.

        Raises:
            NotFoundError: If no item has this id
            InvalidInputError: If a required field is explicitly nulled
        """
        item = self.menu_repository.get_item(item_id)
        if item is None:
            raise NotFoundError("Menu item not found")

        changes = payload.model_dump(exclude_unset=True)
        for field in ("name", "price", "category", "is_available"):
            if field in changes and changes[field] is None:
                raise InvalidInputError(f"{field} cannot be null")

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise InvalidInputError("name must not be blank")
        if changes.get("description") is None:
            changes.pop("description", None)

        updated = item.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
        # Re-run field validation on the merged document
        updated = MenuItem.model_validate(updated.model_dump())

        self.menu_repository.save_item(updated)
        record_menu_write("update")
        logger.info(f"Updated menu item {item_id}: {', '.join(sorted(changes)) or 'no fields'}")
        return updated

    @traced("menu.delete")
    async def delete_menu_item(self, item_id: str) -> None:
        """Delete a menu item.

        Raises:
            NotFoundError: If no item has this id
        """
        if not self.menu_repository.delete_item(item_id):
            raise NotFoundError("Menu item not found")

        record_menu_write("delete")
        logger.info(f"Deleted menu item {item_id}")
