from __future__ import annotations

from dataclasses import dataclass


def calculate_proposed_amount(amount: int) -> int:
    """Advisory subsidy: half the requested amount, rounded down."""

    return amount // 2


@dataclass(frozen=True)
class SubsidyCalculation:
    original_amount: int
    proposed_amount: int


def calculate_subsidy(amount: int) -> SubsidyCalculation:
    return SubsidyCalculation(original_amount=amount, proposed_amount=calculate_proposed_amount(amount))
