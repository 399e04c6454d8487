from decimal import Decimal

from receiptsplit.models import ItemSplit, SplitType
from receiptsplit.services.split import equal_shares, item_shares, merge_shares, quantity_shares


def test_equal_shares_even():
    shares = equal_shares(Decimal("12.00"), ["a", "b"])
    assert shares == {"a": Decimal("6"), "b": Decimal("6")}


def test_equal_shares_empty_members():
    assert equal_shares(Decimal("12.00"), []) == {}


def test_equal_shares_ignores_duplicates():
    shares = equal_shares(Decimal("9.00"), ["a", "b", "a", "c"])
    assert list(shares) == ["a", "b", "c"]
    assert shares["a"] == Decimal("3")


def test_quantity_shares_whole_units():
    shares = quantity_shares(Decimal("9.00"), {"a": 2, "b": 1}, ["a", "b", "c"])
    assert shares == {"a": Decimal("6"), "b": Decimal("3")}
    assert "c" not in shares


def test_quantity_shares_fractional_units():
    shares = quantity_shares(Decimal("10.00"), {"a": Decimal("0.5"), "b": Decimal("1.5")}, ["a", "b"])
    assert shares == {"a": Decimal("2.5"), "b": Decimal("7.5")}


def test_quantity_shares_zero_units_excluded():
    shares = quantity_shares(Decimal("4.00"), {"a": 1, "b": 0}, ["a", "b"])
    assert shares == {"a": Decimal("4")}


def test_quantity_shares_fallback_to_equal():
    shares = quantity_shares(Decimal("6.00"), {"a": 0}, ["a", "b", "c"])
    assert shares == {"a": Decimal("2"), "b": Decimal("2"), "c": Decimal("2")}


def test_item_shares_quantity_fallback_uses_assignment_keys():
    split = ItemSplit(item_id="item-0", split_type=SplitType.QUANTITY, quantity_assignments={"a": 0, "b": 0})
    shares = item_shares(Decimal("5.00"), split)
    assert shares == {"a": Decimal("2.5"), "b": Decimal("2.5")}


def test_item_shares_custom_is_equal_over_subset():
    split = ItemSplit(item_id="item-0", split_type=SplitType.CUSTOM, shared_by=["b", "c"])
    assert item_shares(Decimal("8.00"), split) == {"b": Decimal("4"), "c": Decimal("4")}


def test_merge_shares():
    merged = merge_shares([{"a": Decimal("1.50")}, {"a": Decimal("2"), "b": Decimal("1")}])
    assert merged == {"a": Decimal("3.50"), "b": Decimal("1")}
