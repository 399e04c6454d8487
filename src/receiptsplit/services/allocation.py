"""
Распределение суммы чека между участниками с точностью до цента.

Порядок работы:

1. accumulate_gross_shares: «грязные» доли каждого участника по позициям,
   налогу и сборам.
2. scale_to_target: пропорциональное масштабирование на итоговую сумму чека
   (в ней уже учтена скидка).
3. reconcile_pennies: округление до центов и раздача остатка по одному центу,
   чтобы сумма долей совпала с итогом ровно.

Округление: ROUND_HALF_UP (половина от нуля), как у round(x * 100) / 100.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from receiptsplit.config import get_settings
from receiptsplit.logging import get_logger
from receiptsplit.models import BillRecord, FinalSplit, SharingConfig
from receiptsplit.services.split import equal_shares, item_shares, merge_shares, unique_members
from receiptsplit.utils.parse import CENT, ZERO, Amount, quantize_cents, to_decimal

log = get_logger(__name__)


@dataclass(slots=True)
class AllocationResult:
    shares: dict[str, Decimal]
    gross_total: Decimal
    target_total: Decimal
    discrepancy_cents: int = 0
    used_equal_fallback: bool = False
    calculation_warning: bool = False

    @property
    def total(self) -> Decimal:
        return sum(self.shares.values(), ZERO)

    def final_splits(self) -> list[FinalSplit]:
        return [FinalSplit(user_id=member, amount_owed=amount) for member, amount in self.shares.items()]


def accumulate_gross_shares(
    bill: BillRecord,
    sharing: SharingConfig,
    roster: Sequence[str],
) -> tuple[dict[str, Decimal], Decimal]:
    members = unique_members(roster)
    gross: dict[str, Decimal] = {member: ZERO for member in members}

    contributions = []
    for index, item in enumerate(bill.items):
        split = sharing.split_for(index)
        if split is None:
            continue
        contributions.append(item_shares(item.price, split))

    if bill.taxes > 0:
        contributions.append(equal_shares(bill.taxes, sharing.tax_shared_by))
    if bill.other_charges > 0:
        contributions.append(equal_shares(bill.other_charges, sharing.other_charges_shared_by))

    for member, amount in merge_shares(contributions).items():
        # доли тех, кого нет в составе, просто отбрасываются
        if member in gross:
            gross[member] += amount

    return gross, sum(gross.values(), ZERO)


def scale_to_target(
    gross: Mapping[str, Decimal],
    gross_total: Amount,
    target_total: Amount,
    roster: Sequence[str],
) -> dict[str, Decimal]:
    members = unique_members(roster)
    gross_total = to_decimal(gross_total)
    target = to_decimal(target_total)

    if gross_total == 0:
        if target == 0 or not members:
            return {member: ZERO for member in members}
        per_member = target / Decimal(len(members))
        return {member: per_member for member in members}

    return {member: to_decimal(gross.get(member)) * target / gross_total for member in members}


def round_shares(scaled: Mapping[str, Amount], roster: Sequence[str]) -> dict[str, Decimal]:
    return {member: quantize_cents(scaled.get(member)) for member in unique_members(roster)}


def discrepancy_cents(rounded: Mapping[str, Decimal], target_total: Amount) -> int:
    remainder = quantize_cents(target_total) - sum(rounded.values(), ZERO)
    return int((remainder / CENT).to_integral_value())


def reconcile_pennies(
    scaled: Mapping[str, Amount],
    target_total: Amount,
    roster: Sequence[str],
) -> dict[str, Decimal]:
    """
    Округляет доли до центов и раздаёт расхождение по одному центу.

    Участники обходятся по убыванию округлённой доли (при равенстве в порядке
    состава), по кругу, не больше 2 * N шагов. Если расхождение после этого
    осталось, оно целиком уходит первому в порядке обхода.
    """
    members = unique_members(roster)
    rounded = round_shares(scaled, members)
    remaining = discrepancy_cents(rounded, target_total)
    if remaining == 0 or not members:
        return rounded

    order = sorted(members, key=lambda member: rounded[member], reverse=True)
    step = 1 if remaining > 0 else -1
    limit = 2 * len(order)

    i = 0
    while remaining != 0 and i < limit:
        rounded[order[i % len(order)]] += step * CENT
        remaining -= step
        i += 1

    if remaining != 0:
        rounded[order[0]] += remaining * CENT

    return rounded


def allocate_shares(
    gross: Mapping[str, Amount],
    target_total: Amount,
    roster: Sequence[str],
) -> dict[str, Decimal]:
    members = unique_members(roster)
    sanitized = {member: to_decimal(gross.get(member)) for member in members}
    gross_total = sum(sanitized.values(), ZERO)
    scaled = scale_to_target(sanitized, gross_total, target_total, members)
    return reconcile_pennies(scaled, target_total, members)


def allocate_bill(
    bill: BillRecord,
    sharing: SharingConfig,
    roster: Sequence[str],
    target_total: Optional[Amount] = None,
    warning_tolerance: Optional[Decimal] = None,
) -> AllocationResult:
    """
    Считает, сколько должен каждый участник из roster.

    target_total по умолчанию берётся из чека (total_cost); пользователь может
    подтвердить или переопределить его. Сумма долей равна target_total,
    округлённому до цента, для любого непустого состава.
    """
    members = unique_members(roster)
    target = quantize_cents(bill.total_cost if target_total is None else target_total)
    if warning_tolerance is None:
        warning_tolerance = get_settings().calculation_warning_tolerance

    gross, gross_total = accumulate_gross_shares(bill, sharing, members)
    used_fallback = gross_total == 0 and target != 0 and bool(members)
    if used_fallback:
        log.info("allocation.equal_fallback", members=len(members), target=str(target))

    scaled = scale_to_target(gross, gross_total, target, members)
    pre_reconciliation = discrepancy_cents(round_shares(scaled, members), target)
    warning = abs(pre_reconciliation) * CENT > warning_tolerance
    if warning:
        log.warning(
            "allocation.calculation_warning",
            discrepancy_cents=pre_reconciliation,
            target=str(target),
        )

    shares = reconcile_pennies(scaled, target, members)
    if pre_reconciliation:
        log.debug("allocation.reconciled", discrepancy_cents=pre_reconciliation, members=len(members))

    return AllocationResult(
        shares=shares,
        gross_total=gross_total,
        target_total=target,
        discrepancy_cents=pre_reconciliation,
        used_equal_fallback=used_fallback,
        calculation_warning=warning,
    )
