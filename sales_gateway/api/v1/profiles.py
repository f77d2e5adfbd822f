"""GET /v1/profiles/{cpf} - Returning-client profile and pre-filled purchase draft"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from sales_gateway.api.dependencies import get_container
from sales_gateway.api.v1.schemas import ProfileResponse
from sales_gateway.domain.identity import normalize_cpf
from sales_gateway.domain.merge import apply_profile
from sales_gateway.domain.models import PurchaseRecord
from sales_gateway.services.container import AppContainer

router = APIRouter()


@router.get("/profiles/{cpf}", response_model=ProfileResponse)
def get_profile(cpf: str, container: AppContainer = Depends(get_container)):
    """
    Merge a client's history into a profile for the new-purchase form.

    Returns 404 when the CPF has no history; the form keeps whatever was typed.
    """
    if not normalize_cpf(cpf):
        raise HTTPException(status_code=400, detail="CPF must contain digits")

    profile = container.synchronizer.profile_for(cpf)
    if profile is None:
        raise HTTPException(status_code=404, detail="No purchase history for this CPF")

    draft = apply_profile(PurchaseRecord(client_cpf=cpf, purchase_date=date.today()), profile)
    return ProfileResponse.from_profile(profile, draft)
