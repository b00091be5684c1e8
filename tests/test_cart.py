"""
Tests for the Cart store
"""

from decimal import Decimal

import pytest

from unigo.cart import Cart, CartLineItem, StockWarning
from unigo.errors import CartStoreError
from unigo.services.models import MarketplaceProduct, MenuItem


class TestCartLineItem:
    """Tests for CartLineItem dataclass."""

    def test_create_line_item(self, make_menu_item):
        """Test creating a line item."""
        line = CartLineItem(item=make_menu_item(), quantity=2)

        assert line.item_id == "menu-1"
        assert line.quantity == 2
        assert line.added_at != ""

    def test_unit_price_uses_discount(self, make_product):
        """Discount price wins over list price when set."""
        line = CartLineItem(item=make_product(price="45.00", discount_price="39.99"), quantity=1)
        assert line.unit_price == Decimal("39.99")

    def test_zero_discount_is_ignored(self, make_product):
        line = CartLineItem(item=make_product(price="45.00", discount_price="0"), quantity=1)
        assert line.unit_price == Decimal("45.00")

    def test_line_total(self, make_menu_item):
        line = CartLineItem(item=make_menu_item(price="2.50"), quantity=3)
        assert line.line_total == Decimal("7.50")

    def test_from_dict(self, make_menu_item):
        """Test deserialization from dict."""
        data = CartLineItem(item=make_menu_item(), quantity=1, notes="no onions").to_dict()

        line = CartLineItem.from_dict(data, MenuItem)
        assert line.item_id == "menu-1"
        assert line.notes == "no onions"
        assert line.item.vendor_id == "vendor-1"


class TestCartAdd:
    """Tests for Cart.add."""

    def test_add_new_line(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(), 2)

        assert len(cart) == 1
        assert cart.get("menu-1").quantity == 2

    def test_repeated_add_sums_quantities(self, make_menu_item):
        cart = Cart()
        item = make_menu_item()
        for quantity in (1, 3, 2):
            cart.add(item, quantity)

        assert len(cart) == 1
        assert cart.get("menu-1").quantity == 6

    def test_add_does_not_clamp_to_stock(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(stock=2), 5)
        assert cart.get("menu-1").quantity == 5

    def test_add_over_stock_reports_warning(self, make_product):
        cart = Cart()
        line = cart.add(make_product(stock=2), 5)

        warning = line.stock_warning()

        assert warning == StockWarning(item_id="product-1", item_name="Product product-1", requested=5, available=2)
        assert line.quantity == 5

    @pytest.mark.parametrize("stock", [None, 5])
    def test_add_within_stock_has_no_warning(self, make_product, stock):
        cart = Cart()
        assert cart.add(make_product(stock=stock), 5).stock_warning() is None

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_add_rejects_non_positive_quantity(self, make_menu_item, quantity):
        cart = Cart()
        with pytest.raises(CartStoreError, match="quantity must be positive"):
            cart.add(make_menu_item(), quantity)
        assert cart.is_empty

    def test_add_keeps_insertion_order(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("b"), 1)
        cart.add(make_menu_item("a"), 1)
        cart.add(make_menu_item("b"), 1)

        assert [line.item_id for line in cart] == ["b", "a"]

    def test_later_notes_replace_earlier(self, make_menu_item):
        cart = Cart()
        item = make_menu_item()
        cart.add(item, 1, notes="extra cheese")
        cart.add(item, 1)
        assert cart.get("menu-1").notes == "extra cheese"

        cart.add(item, 1, notes="no cheese")
        assert cart.get("menu-1").notes == "no cheese"

    def test_attributes_are_copied(self, make_product):
        cart = Cart()
        attributes = {"size": "M"}
        cart.add(make_product(), 1, attributes=attributes)
        attributes["size"] = "XL"

        assert cart.get("product-1").attributes == {"size": "M"}


class TestCartRemoveAndUpdate:
    """Tests for remove / update_quantity / clear."""

    def test_remove_present_line(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(), 1)
        cart.remove("menu-1")
        assert cart.is_empty

    def test_remove_absent_is_noop(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(), 1)
        before = cart.to_dict()

        cart.remove("missing")
        assert cart.to_dict() == before

    def test_update_to_zero_matches_remove(self, make_menu_item):
        removed, updated = Cart(), Cart()
        for cart in (removed, updated):
            cart.add(make_menu_item("a"), 2)
            cart.add(make_menu_item("b"), 1)

        removed.remove("a")
        updated.update_quantity("a", 0)

        assert [(l.item_id, l.quantity) for l in removed] == [(l.item_id, l.quantity) for l in updated]

    def test_update_negative_removes(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(), 2)
        assert cart.update_quantity("menu-1", -3) is None
        assert cart.is_empty

    def test_update_sets_exact_quantity(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(stock=10), 2)
        assert cart.update_quantity("menu-1", 7) is None
        assert cart.get("menu-1").quantity == 7

    def test_update_above_stock_clamps_with_warning(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(stock=3, name="Samosa"), 2)

        warning = cart.update_quantity("menu-1", 5)

        assert cart.get("menu-1").quantity == 3
        assert isinstance(warning, StockWarning)
        assert warning.requested == 5
        assert warning.available == 3
        assert "Samosa" in warning.message

    def test_update_with_no_stock_left_removes(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(stock=0), 1)

        warning = cart.update_quantity("menu-1", 2)

        assert warning is not None
        assert cart.is_empty

    def test_update_absent_line_is_noop(self):
        cart = Cart()
        assert cart.update_quantity("missing", 4) is None
        assert cart.is_empty

    def test_refresh_item_updates_stock_snapshot(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(stock=10), 2)
        cart.refresh_item(make_menu_item(stock=4))

        warning = cart.update_quantity("menu-1", 6)
        assert warning.available == 4
        assert cart.get("menu-1").quantity == 4

    def test_clear(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("a"), 1)
        cart.add(make_menu_item("b"), 1)
        cart.clear()
        assert cart.is_empty
        assert cart.item_count() == 0

    def test_clear_empty_cart_is_silent(self):
        cart = Cart()
        updated_at = cart.updated_at
        cart.clear()
        assert cart.is_empty
        assert cart.updated_at == updated_at


class TestCartSnapshot:
    """Tests for snapshot / discard."""

    def test_snapshot_is_detached(self, make_product):
        cart = Cart()
        cart.add(make_product("p1"), 1, attributes={"size": "M"})

        ordered = cart.snapshot()
        cart.add(make_product("p1"), 2, attributes={"size": "XL"})
        cart.add(make_product("p2"), 1)

        assert [(line.item_id, line.quantity) for line in ordered] == [("p1", 1)]
        assert ordered.get("p1").attributes == {"size": "M"}

    def test_discard_removes_ordered_lines(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("a"), 2)
        cart.add(make_menu_item("b"), 1)

        cart.discard(cart.snapshot())

        assert cart.is_empty

    def test_discard_keeps_later_additions(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("a"), 2)
        ordered = cart.snapshot()
        cart.add(make_menu_item("a"), 3)
        cart.add(make_menu_item("late"), 1)

        cart.discard(ordered)

        assert [(line.item_id, line.quantity) for line in cart] == [("a", 3), ("late", 1)]

    def test_discard_ignores_lines_already_removed(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("a"), 2)
        ordered = cart.snapshot()
        cart.remove("a")

        cart.discard(ordered)

        assert cart.is_empty


class TestCartTotals:
    """Tests for total / item_count."""

    def test_empty_totals(self):
        cart = Cart()
        assert cart.total() == Decimal("0")
        assert cart.item_count() == 0

    def test_two_lines(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("a", price="10"), 2)
        cart.add(make_menu_item("b", price="5"), 1)

        assert cart.total() == Decimal("25")
        assert cart.item_count() == 3
        assert len(cart) == 2

    def test_total_uses_discount_price(self, make_product):
        cart = Cart()
        cart.add(make_product(price="45.00", discount_price="39.99"), 2)
        assert cart.total() == Decimal("79.98")

    def test_total_matches_line_sum_after_edits(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item("a", price="3.25", stock=4), 2)
        cart.add(make_menu_item("b", price="1.10"), 5)
        cart.update_quantity("a", 9)
        cart.add(make_menu_item("c", price="0.99"), 1)
        cart.remove("b")
        cart.update_quantity("c", 3)

        expected = sum((line.unit_price * line.quantity for line in cart), Decimal("0"))
        assert cart.total() == expected
        assert cart.total() >= 0


class TestCartSerialization:
    """Tests for to_dict / from_dict."""

    def test_round_trip_keeps_lines_and_prices(self, make_product):
        cart = Cart()
        cart.add(make_product(discount_price="39.99", stock=3), 2, attributes={"size": "L"})

        restored = Cart.from_dict(cart.to_dict(), MarketplaceProduct)

        assert restored.get("product-1").quantity == 2
        assert restored.get("product-1").attributes == {"size": "L"}
        assert restored.total() == cart.total()
        assert restored.created_at == cart.created_at

    def test_from_dict_drops_non_positive_lines(self, make_menu_item):
        cart = Cart()
        cart.add(make_menu_item(), 1)
        data = cart.to_dict()
        data["lines"][0]["quantity"] = 0

        assert Cart.from_dict(data, MenuItem).is_empty
