"""Cart models with Decimal-based pricing.

``Cart`` is the store: an ordered collection of ``CartLineItem`` keyed by
catalog item id, generic over the catalog item type so the cafeteria
(``MenuItem``) and marketplace (``MarketplaceProduct``) carts share one
implementation.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from unigo.errors import ERROR_QUANTITY_NOT_POSITIVE, CartStoreError
from unigo.logging import get_logger, sanitize_id_for_logging
from unigo.services.models import CatalogItem
from unigo.services.money import multiply, round_money

logger = get_logger(__name__)

ItemT = TypeVar("ItemT", bound=CatalogItem)


@dataclass
class StockWarning:
    """Notice that a quantity was clamped to available stock."""
    item_id: str
    item_name: str
    requested: int
    available: int

    @property
    def message(self) -> str:
        return f"Only {self.available} of {self.item_name} available."

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "requested": self.requested,
            "available": self.available,
            "message": self.message,
        }


@dataclass
class CartLineItem(Generic[ItemT]):
    """Single item in the cart."""
    item: ItemT
    quantity: int
    notes: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    added_at: str = ""

    def __post_init__(self):
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def unit_price(self) -> Decimal:
        """Price per unit, discounted when the item carries a discount price."""
        return self.item.effective_price

    @property
    def line_total(self) -> Decimal:
        return round_money(multiply(self.unit_price, self.quantity))

    def stock_warning(self) -> Optional[StockWarning]:
        """Warning when the line asks for more than the item's known stock."""
        stock = self.item.stock
        if stock is None or self.quantity <= stock:
            return None
        return StockWarning(
            item_id=self.item_id,
            item_name=self.item.name,
            requested=self.quantity,
            available=stock,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "item": self.item.model_dump(mode="json"),
            "quantity": self.quantity,
            "notes": self.notes,
            "attributes": self.attributes,
            "added_at": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: dict, item_type: Type[ItemT]) -> "CartLineItem[ItemT]":
        """Create from dictionary."""
        return cls(
            item=item_type(**data["item"]),
            quantity=int(data["quantity"]),
            notes=data.get("notes"),
            attributes=data.get("attributes"),
            added_at=data.get("added_at", ""),
        )


@dataclass
class Cart(Generic[ItemT]):
    """Shopping cart containing at most one line per catalog item id."""
    lines: List[CartLineItem[ItemT]] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        now = datetime.now(timezone.utc).isoformat()
        if not self.created_at:
            self.created_at = now
        if not self.updated_at:
            self.updated_at = now

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[CartLineItem[ItemT]]:
        return iter(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def get(self, item_id: str) -> Optional[CartLineItem[ItemT]]:
        return next((line for line in self.lines if line.item_id == item_id), None)

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc).isoformat()

    def refresh_item(self, item: ItemT) -> None:
        """Replace the catalog snapshot held by the line for item.id, if any."""
        line = self.get(item.id)
        if line is not None:
            line.item = item

    # ---------- mutations ----------

    def add(
        self,
        item: ItemT,
        quantity: int,
        notes: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> CartLineItem[ItemT]:
        """Add ``quantity`` of ``item``, merging into an existing line."""
        if quantity < 1:
            raise CartStoreError(ERROR_QUANTITY_NOT_POSITIVE)

        existing = self.get(item.id)
        if existing:
            existing.quantity += quantity
            # Latest catalog snapshot wins for price and stock
            existing.item = item
            if notes is not None:
                existing.notes = notes
            if attributes is not None:
                existing.attributes = dict(attributes)
            line = existing
        else:
            line = CartLineItem(
                item=item,
                quantity=quantity,
                notes=notes,
                attributes=dict(attributes) if attributes is not None else None,
            )
            self.lines.append(line)

        self._touch()
        return line

    def remove(self, item_id: str) -> None:
        """Remove the line for ``item_id``; absent ids are ignored."""
        remaining = [line for line in self.lines if line.item_id != item_id]
        if len(remaining) != len(self.lines):
            self.lines = remaining
            self._touch()

    def update_quantity(self, item_id: str, new_quantity: int) -> Optional[StockWarning]:
        """
        Set the quantity of an existing line.

        ``new_quantity <= 0`` removes the line. A quantity above the item's
        known stock is clamped to the stock and a ``StockWarning`` is returned.
        """
        if new_quantity <= 0:
            self.remove(item_id)
            return None

        line = self.get(item_id)
        if line is None:
            return None

        warning = None
        stock = line.item.stock
        if stock is not None and new_quantity > stock:
            warning = StockWarning(
                item_id=item_id,
                item_name=line.item.name,
                requested=new_quantity,
                available=stock,
            )
            logger.warning(
                f"Clamped quantity for item {sanitize_id_for_logging(item_id)}: "
                f"requested {new_quantity}, available {stock}"
            )
            new_quantity = stock

        if new_quantity <= 0:
            # Stock ran out entirely
            self.remove(item_id)
            return warning

        line.quantity = new_quantity
        self._touch()
        return warning

    def clear(self) -> None:
        """Empty the cart."""
        if self.lines:
            self.lines = []
            self._touch()

    def discard(self, ordered: "Cart[ItemT]") -> None:
        """
        Take the quantities in ``ordered`` out of this cart.

        Lines or units added after ``ordered`` was snapshotted stay behind.
        """
        for placed in ordered:
            line = self.get(placed.item_id)
            if line is None:
                continue
            if line.quantity <= placed.quantity:
                self.remove(placed.item_id)
            else:
                line.quantity -= placed.quantity
                self._touch()

    def snapshot(self) -> "Cart[ItemT]":
        """Independent copy whose lines later edits cannot reach."""
        return Cart(
            lines=[
                replace(line, attributes=dict(line.attributes) if line.attributes is not None else None)
                for line in self.lines
            ],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    # ---------- aggregates ----------

    def total(self) -> Decimal:
        """Sum of unit price times quantity over all lines."""
        return round_money(sum((line.line_total for line in self.lines), Decimal("0")))

    def item_count(self) -> int:
        """Total number of units in cart (not line count)."""
        return sum(line.quantity for line in self.lines)

    # ---------- persistence ----------

    def to_dict(self) -> dict:
        """Convert to dictionary for Redis storage."""
        return {
            "lines": [line.to_dict() for line in self.lines],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict, item_type: Type[ItemT]) -> "Cart[ItemT]":
        """Create from dictionary."""
        lines = [CartLineItem.from_dict(line, item_type) for line in data.get("lines", [])]
        return cls(
            lines=[line for line in lines if line.quantity >= 1],
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )
