"""Формирование расхода для внешнего сервиса учёта долгов (create_expense)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence, Union

from receiptsplit.config import get_settings
from receiptsplit.logging import get_logger
from receiptsplit.models import BillRecord, FinalSplit
from receiptsplit.utils.parse import ZERO, Amount, format_amount, format_currency, quantize_cents

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ExpensePayloadError(ValueError):
    pass


@dataclass(slots=True)
class ExpensePayloadOptions:
    store_name: str
    date: Union[str, date]
    payer_id: str
    notes: str = ""
    group_id: Optional[int] = None


def _local_date(moment: datetime) -> date:
    # время с таймзоной переводим в локальную дату
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def format_expense_date(value: Union[str, date]) -> str:
    if isinstance(value, datetime):
        return _local_date(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = value.strip()
    if ISO_DATE.match(text):
        return text
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _local_date(datetime.fromisoformat(text)).isoformat()
    except ValueError as exc:
        raise ExpensePayloadError(f"Unrecognized expense date: {value!r}") from exc


def _ledger_user_id(user_id: str) -> Union[int, str]:
    return int(user_id) if user_id.isdigit() else user_id


def build_expense_payload(
    splits: Sequence[FinalSplit],
    total_cost: Amount,
    options: ExpensePayloadOptions,
) -> dict[str, Any]:
    """
    Собирает плоскую форму расхода: users__<i>__user_id / paid_share / owed_share.

    Все суммы передаются строками ровно с двумя знаками. Сервис отвергает
    расходы, у которых доли не сходятся с cost, поэтому проверяем это здесь.
    """
    if not splits:
        raise ExpensePayloadError("Expense must have at least one participant.")

    cost = quantize_cents(total_cost)
    owed_total = sum((quantize_cents(split.amount_owed) for split in splits), ZERO)
    if owed_total != cost:
        raise ExpensePayloadError(
            f"Split total ({format_currency(owed_total)}) doesn't match bill total ({format_currency(cost)})."
        )

    if all(split.user_id != options.payer_id for split in splits):
        raise ExpensePayloadError("Payer must be one of the expense participants.")

    settings = get_settings()
    payload: dict[str, Any] = {
        "cost": format_amount(cost),
        "description": options.store_name or settings.default_store_name,
        "group_id": options.group_id if options.group_id is not None else 0,
        "date": format_expense_date(options.date),
        "details": options.notes,
        "currency_code": settings.currency_code,
        "category_id": settings.expense_category_id,
        "split_equally": False,
    }

    for index, split in enumerate(splits):
        is_payer = split.user_id == options.payer_id
        payload[f"users__{index}__user_id"] = _ledger_user_id(split.user_id)
        payload[f"users__{index}__paid_share"] = format_amount(cost if is_payer else ZERO)
        payload[f"users__{index}__owed_share"] = format_amount(split.amount_owed)

    get_logger(__name__).info("payload.built", cost=payload["cost"], participants=len(splits))
    return payload


def generate_expense_notes(
    bill: BillRecord,
    store_name: Optional[str] = None,
    expense_date: Optional[Union[str, date]] = None,
) -> str:
    store = store_name or bill.store_name or get_settings().default_store_name
    lines = [f"Store: {store}"]
    when = expense_date or bill.date
    if when:
        lines.append(f"Date: {format_expense_date(when)}")

    lines.append("")
    lines.append(f"Items Subtotal: {format_currency(bill.items_subtotal)}")
    for item in bill.items:
        lines.append(f"- {item.name}: {format_currency(item.price)}")

    if bill.taxes > 0:
        lines.append(f"Tax: {format_currency(bill.taxes)}")
    if bill.other_charges > 0:
        lines.append(f"Other Charges: {format_currency(bill.other_charges)}")
    if bill.discount > 0:
        lines.append(f"Discount Applied: -{format_currency(bill.discount)}")

    lines.append("")
    lines.append(f"Grand Total (on receipt): {format_currency(bill.total_cost)}")
    if bill.discrepancy_flag:
        lines.append("")
        lines.append(f"Note: Original bill data discrepancy: {bill.discrepancy_message}")
    return "\n".join(lines)
