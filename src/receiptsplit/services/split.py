from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from receiptsplit.models import ItemSplit, SplitType
from receiptsplit.utils.parse import ZERO, Amount, to_decimal


def unique_members(members: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(members))


def equal_shares(amount: Amount, members: Sequence[str]) -> dict[str, Decimal]:
    """Делит сумму поровну. Пустой список участников ничего не получает."""
    consumers = unique_members(members)
    if not consumers:
        return {}

    share = to_decimal(amount) / Decimal(len(consumers))
    return {member: share for member in consumers}


def quantity_shares(
    price: Amount,
    assignments: Mapping[str, Amount],
    fallback_members: Sequence[str],
) -> dict[str, Decimal]:
    """
    Делит позицию по количеству единиц.

    Цена делится на сумму назначенных единиц (допускаются дробные, например 0.5),
    каждый платит цену единицы, умноженную на свои единицы. Участники с нулём
    единиц в результат не попадают. Если единиц не назначено совсем, позиция
    делится поровну между fallback_members.
    """
    units = {member: to_decimal(value) for member, value in assignments.items()}
    units = {member: value for member, value in units.items() if value > 0}
    total_units = sum(units.values(), ZERO)

    if total_units <= 0:
        return equal_shares(price, fallback_members)

    unit_price = to_decimal(price) / total_units
    return {member: unit_price * value for member, value in units.items()}


def item_shares(price: Amount, split: ItemSplit) -> dict[str, Decimal]:
    if split.split_type == SplitType.QUANTITY:
        # запасной набор: участники позиции, а при их отсутствии все, у кого есть запись
        fallback = split.shared_by or list(split.quantity_assignments)
        return quantity_shares(price, split.quantity_assignments, fallback)
    return equal_shares(price, split.shared_by)


def merge_shares(shares: Iterable[Mapping[str, Decimal]]) -> dict[str, Decimal]:
    result: dict[str, Decimal] = {}
    for share in shares:
        for member, amount in share.items():
            result[member] = result.get(member, ZERO) + amount
    return result
