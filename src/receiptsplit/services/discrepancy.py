from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from receiptsplit.config import get_settings
from receiptsplit.models import BillRecord, FinalSplit, SharingConfig, SplitType
from receiptsplit.utils.parse import ZERO, Amount, format_amount, quantize_cents, to_decimal

FINAL_SPLIT_TOLERANCE = Decimal("0.015")
MANUAL_SPLIT_TOLERANCE = Decimal("0.01")


@dataclass(slots=True)
class BillDiscrepancy:
    flag: bool
    calculated_total: Decimal
    difference: Decimal
    message: Optional[str] = None


@dataclass(slots=True)
class SplitValidation:
    is_valid: bool
    calculated_total: Decimal
    difference: Decimal


def calculate_discrepancy(bill: BillRecord, tolerance: Optional[Decimal] = None) -> BillDiscrepancy:
    if tolerance is None:
        tolerance = get_settings().discrepancy_tolerance

    calculated = bill.calculated_total
    difference = abs(calculated - bill.total_cost)
    flag = difference > tolerance
    message = None
    if flag:
        message = (
            f"Receipt total (${format_amount(bill.total_cost)}) differs from calculated total "
            f"(${format_amount(calculated)}) by ${format_amount(difference)}. "
            "This may indicate missing items, fees, or rounding differences."
        )
    return BillDiscrepancy(flag=flag, calculated_total=calculated, difference=difference, message=message)


def validate_final_splits(
    splits: Sequence[FinalSplit],
    target_total: Decimal,
    tolerance: Decimal = FINAL_SPLIT_TOLERANCE,
) -> SplitValidation:
    calculated = quantize_cents(sum((to_decimal(split.amount_owed) for split in splits), ZERO))
    difference = abs(calculated - to_decimal(target_total))
    return SplitValidation(is_valid=difference < tolerance, calculated_total=calculated, difference=difference)


def can_finalize(
    bill: BillRecord,
    splits: Sequence[FinalSplit],
    payer_id: Optional[str],
    target_total: Optional[Amount] = None,
) -> tuple[bool, Optional[str]]:
    """target_total: подтверждённый пользователем итог, по умолчанию total_cost чека."""
    if not payer_id:
        return False, "Please select who paid the bill."

    if bill.discrepancy_flag:
        return False, "Cannot finalize due to bill discrepancy. Please edit item prices to fix the discrepancy."

    target = quantize_cents(bill.total_cost if target_total is None else target_total)
    if not validate_final_splits(splits, target).is_valid:
        return False, "Cannot finalize due to calculation mismatch."

    return True, None


def validate_receipt_splits(bill: BillRecord, sharing: SharingConfig) -> list[str]:
    """
    Проверяет настройку разделения чека до расчёта.

    Ловит то, что иначе молча ушло бы в «ничейные» позиции: custom без
    участников, налог или сборы без тех, кто их делит.
    """
    errors: list[str] = []

    for split in sharing.item_splits:
        if split.split_type == SplitType.CUSTOM and not split.shared_by:
            errors.append(f"Please select members for the custom split of: {_item_label(bill, split.item_id)}.")

    if bill.taxes > 0 and not sharing.tax_shared_by:
        errors.append("Please select members to split the tax.")

    if bill.other_charges > 0 and not sharing.other_charges_shared_by:
        errors.append("Please select members to split other charges.")

    return errors


def validate_manual_splits(amount: Amount, custom_amounts: Mapping[str, Amount]) -> list[str]:
    errors: list[str] = []
    expected = to_decimal(amount)
    values = [to_decimal(value) for value in custom_amounts.values()]
    total = sum(values, ZERO)

    if abs(total - expected) > MANUAL_SPLIT_TOLERANCE:
        errors.append(f"Custom amounts total ${format_amount(total)} but expense is ${format_amount(expected)}")

    if any(value <= 0 for value in values):
        errors.append("All amounts must be greater than zero.")

    return errors


def _item_label(bill: BillRecord, item_id: str) -> str:
    _, _, index = item_id.partition("-")
    if index.isdigit() and int(index) < len(bill.items) and bill.items[int(index)].name:
        return bill.items[int(index)].name
    return item_id
