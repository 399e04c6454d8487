from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from receiptsplit.utils.parse import ZERO, to_decimal


class SplitType(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"
    QUANTITY = "quantity"


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class ReceiptItem(_Model):
    name: str = ""
    price: Decimal = ZERO

    @field_validator("price", mode="before")
    @classmethod
    def _sanitize_price(cls, value: object) -> Decimal:
        return to_decimal(value)  # type: ignore[arg-type]


class BillRecord(_Model):
    """Данные чека в том виде, в каком их отдаёт сервис распознавания."""

    store_name: Optional[str] = Field(None, alias="storeName")
    date: Optional[str] = None
    items: list[ReceiptItem] = Field(default_factory=list)
    total_cost: Decimal = Field(ZERO, alias="totalCost")
    taxes: Decimal = ZERO
    other_charges: Decimal = Field(ZERO, alias="otherCharges")
    discount: Decimal = ZERO
    discrepancy_flag: bool = Field(False, alias="discrepancyFlag")
    discrepancy_message: Optional[str] = Field(None, alias="discrepancyMessage")

    @field_validator("total_cost", "taxes", "other_charges", "discount", mode="before")
    @classmethod
    def _sanitize_amount(cls, value: object) -> Decimal:
        return to_decimal(value)  # type: ignore[arg-type]

    @property
    def items_subtotal(self) -> Decimal:
        return sum((item.price for item in self.items), ZERO)

    @property
    def calculated_total(self) -> Decimal:
        return self.items_subtotal + self.taxes + self.other_charges - self.discount


class ItemSplit(_Model):
    item_id: str = Field(alias="itemId")
    split_type: SplitType = Field(SplitType.EQUAL, alias="splitType")
    shared_by: list[str] = Field(default_factory=list, alias="sharedBy")
    quantity_assignments: dict[str, Decimal] = Field(default_factory=dict, alias="quantityAssignments")

    @field_validator("quantity_assignments", mode="before")
    @classmethod
    def _sanitize_units(cls, value: object) -> dict[str, Decimal]:
        if not isinstance(value, dict):
            return {}
        # отрицательные и битые количества считаем нулём
        return {str(member): max(to_decimal(units), ZERO) for member, units in value.items()}


class SharingConfig(_Model):
    item_splits: list[ItemSplit] = Field(default_factory=list, alias="itemSplits")
    tax_shared_by: list[str] = Field(default_factory=list, alias="taxSharedBy")
    other_charges_shared_by: list[str] = Field(default_factory=list, alias="otherChargesSharedBy")

    def split_for(self, index: int) -> Optional[ItemSplit]:
        item_id = item_id_for(index)
        for split in self.item_splits:
            if split.item_id == item_id:
                return split
        return None


def item_id_for(index: int) -> str:
    return f"item-{index}"


@dataclass(slots=True)
class FinalSplit:
    user_id: str
    amount_owed: Decimal
