"""Unit tests for the inventory view helpers (pure logic, no DB)."""

from uuid import uuid4

from spraydesk.models.enums import InventorySort
from spraydesk.models.inventory import InventoryItem
from spraydesk.services.inventory_service import (
    ALL_CATEGORIES,
    filter_inventory,
    list_categories,
    low_stock_items,
)


def item(name, quantity, category, threshold=5, unit="L"):
    return InventoryItem(
        id=uuid4(), name=name, quantity=quantity, unit=unit, category=category, threshold=threshold
    )


STOCK = [
    item("Red Paint", 10, "Paint"),
    item("blue paint", 3, "Paint"),
    item("Sandpaper P400", 40, "Abrasives", unit="sheets"),
    item("Clear Coat", 2, "Paint", threshold=2),
    item("Masking Tape", 0, "Consumables", threshold=1, unit="rolls"),
]


def names(items):
    return [i.name for i in items]


def test_search_is_case_insensitive_substring():
    result = filter_inventory(STOCK, search="PAINT")
    assert names(result) == ["blue paint", "Red Paint"]


def test_category_filter_then_sort_by_stock():
    result = filter_inventory(STOCK, category="Paint", sort_by=InventorySort.STOCK)
    assert names(result) == ["Red Paint", "blue paint", "Clear Coat"]


def test_all_category_keeps_everything_sorted_by_name():
    result = filter_inventory(STOCK, category=ALL_CATEGORIES)
    assert names(result) == [
        "blue paint", "Clear Coat", "Masking Tape", "Red Paint", "Sandpaper P400",
    ]


def test_no_match_is_empty():
    assert filter_inventory(STOCK, search="primer") == []


def test_works_on_mirrored_rows():
    rows = [
        {"name": "Thinner", "quantity": 4, "category": "Solvents", "threshold": 5},
        {"name": "Primer", "quantity": 9, "category": "Paint", "threshold": 5},
    ]
    assert filter_inventory(rows, sort_by=InventorySort.STOCK)[0]["name"] == "Primer"
    assert low_stock_items(rows) == [rows[0]]


def test_categories_start_with_all_in_first_seen_order():
    assert list_categories(STOCK) == ["All", "Paint", "Abrasives", "Consumables"]
    assert list_categories([]) == ["All"]


def test_low_stock_is_strictly_below_threshold():
    # Clear Coat sits exactly at its threshold and is not low
    assert names(low_stock_items(STOCK)) == ["blue paint", "Masking Tape"]
    assert STOCK[1].is_low_stock
    assert not STOCK[3].is_low_stock
