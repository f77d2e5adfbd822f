"""Installment arithmetic and repayment schedule generation"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List


@dataclass
class Installment:
    """Single payment in a repayment schedule"""

    number: int
    due_date: date
    amount_cents: int


def calculate_installment_price(total: float, down_payment: float, installments: int) -> float:
    """
    Per-installment amount for a sale.

    (total - down) / installments, with installments < 1 treated as 1 and the
    result clamped at zero (a down payment above the total never yields a
    negative installment).
    """
    count = installments if installments and installments > 0 else 1
    price = (float(total or 0) - float(down_payment or 0)) / count
    return price if price > 0 else 0.0


def generate_payment_schedule(
    financed_amount: float,
    num_installments: int,
    interval_days: int,
    start_date: date | None = None,
) -> List[Installment]:
    """
    Split the financed amount into equal installments due every interval_days.

    Requirements:
    - First installment is due on start_date (default: today)
    - Amounts are in cents; the last installment absorbs the rounding remainder

    Example:
        R$100.03 over 4 weekly payments → [2500, 2500, 2500, 2503] cents
    """
    amount_cents = int(round(financed_amount * 100))
    if amount_cents <= 0:
        return []

    count = num_installments if num_installments > 0 else 1
    if start_date is None:
        start_date = date.today()

    base_amount = amount_cents // count
    remainder = amount_cents % count

    schedule = []
    for i in range(count):
        due_date = start_date + timedelta(days=i * interval_days)

        # Last installment absorbs remainder to ensure exact total
        amount = base_amount + (remainder if i == count - 1 else 0)

        schedule.append(Installment(number=i + 1, due_date=due_date, amount_cents=amount))

    return schedule
