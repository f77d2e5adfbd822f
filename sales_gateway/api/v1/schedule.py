"""GET /v1/records/{record_id}/schedule - Payment schedule for a purchase"""

from fastapi import APIRouter, Depends, HTTPException

from sales_gateway.api.dependencies import get_container
from sales_gateway.api.v1.schemas import InstallmentSchema, ScheduleResponse
from sales_gateway.domain.installments import generate_payment_schedule
from sales_gateway.services.container import AppContainer

router = APIRouter()


@router.get("/records/{record_id}/schedule", response_model=ScheduleResponse)
def get_schedule(record_id: str, container: AppContainer = Depends(get_container)):
    """
    Installment schedule derived from the record's cadence.

    Returns:
        One installment per period starting on the payment start date
    """
    record = container.repository.get(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Record not found")

    schedule = generate_payment_schedule(
        record.total_product_price - record.down_payment,
        record.installments,
        record.payment_system.interval_days,
        start_date=record.payment_start_date or record.purchase_date,
    )

    return ScheduleResponse(
        record_id=record.id,
        payment_system=record.payment_system.value,
        installment_price=record.installment_price,
        installments=[
            InstallmentSchema(number=inst.number, due_date=inst.due_date, amount_cents=inst.amount_cents)
            for inst in schedule
        ],
    )
