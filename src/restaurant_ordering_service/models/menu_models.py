"""Menu catalog models.

``MenuItem`` is the stored catalog document. The request models carry the
client payloads for creating and updating items; category values are
normalized and checked against the closed ``MenuCategory`` set here so every
entry point shares the same rules.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

# Decimal internally, JSON number on the wire
Money = Annotated[
    Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")
]


class CamelModel(BaseModel):
    """Base model emitting camelCase keys and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MenuCategory(str, Enum):
    """Closed set of menu categories."""

    APPETIZERS = "appetizers"
    MAINS = "mains"
    DESSERTS = "desserts"
    BEVERAGES = "beverages"
    SALADS = "salads"
    SOUPS = "soups"

    @classmethod
    def parse(cls, value: Any) -> "MenuCategory":
        """Normalize a raw category value.

        Args:
            value: Category name in any case, or an existing MenuCategory

        Returns:
            MenuCategory: The matching category

        Raises:
            ValueError: If the value is not one of the known categories
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError("category must be a string")

        normalized = value.strip().lower()
        for category in cls:
            if category.value == normalized:
                return category

        allowed = ", ".join(c.value for c in cls)
        raise ValueError(f"category must be one of: {allowed}")


class MenuItem(CamelModel):
    """Menu item document."""

    id: str = Field(..., description="Unique identifier for the menu item")
    name: str = Field(..., min_length=1, description="Item name")
    description: str = Field(default="", description="Item description")
    price: Money = Field(..., ge=0, description="Current item price")
    category: MenuCategory = Field(..., description="Menu category")
    is_available: bool = Field(default=True, description="Whether the item can be ordered")
    image_url: str | None = Field(None, description="URL to item image")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> MenuCategory:
        """Lower-case the category before enum validation."""
        return MenuCategory.parse(v)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category.value,
            "is_available": self.is_available,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if self.image_url:
            item["image_url"] = self.image_url

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        """Create MenuItem from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            MenuItem: Parsed model instance
        """
        return cls(
            id=item["id"],
            name=item["name"],
            description=item.get("description", ""),
            price=Decimal(str(item["price"])),
            category=item["category"],
            is_available=bool(item.get("is_available", True)),
            image_url=item.get("image_url"),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )


class MenuItemCreate(CamelModel):
    """Payload for creating a menu item."""

    name: str = Field(..., min_length=1)
    description: str = ""
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category: MenuCategory
    image_url: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> MenuCategory:
        return MenuCategory.parse(v)


class MenuItemUpdate(CamelModel):
    """Partial update payload; only fields that were sent are applied."""

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    category: MenuCategory | None = None
    image_url: str | None = None
    is_available: bool | None = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> MenuCategory | None:
        if v is None:
            return None
        return MenuCategory.parse(v)


class MenuItemSnapshot(CamelModel):
    """Display fields of a menu item, joined into order lines at read time."""

    id: str
    name: str
    description: str
    image_url: str | None = None

    @classmethod
    def from_menu_item(cls, item: MenuItem) -> "MenuItemSnapshot":
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            image_url=item.image_url,
        )
