"""Eligibility state machine gating new purchases per client identity"""

import logging
from typing import Iterable, Optional

from sales_gateway.domain.exceptions import ValidationRejected
from sales_gateway.domain.merge import build_profile
from sales_gateway.domain.models import ClientProfile, ClientStatus, PurchaseRecord

logger = logging.getLogger(__name__)

NOT_ELIGIBLE = "not eligible"


def resolve_status(profile: Optional[ClientProfile]) -> ClientStatus:
    """Never-seen identities are eligible for lookups"""
    if profile is None:
        return ClientStatus.ELIGIBLE
    return profile.client_status


def check_new_purchase(normalized_cpf: str, records: Iterable[PurchaseRecord]) -> Optional[ClientProfile]:
    """
    Gate a new purchase for an identity.

    Raises:
        ValidationRejected: the identity has history and its current status is ineligible

    Returns the profile used for the decision (None for a first purchase).
    """
    profile = build_profile(normalized_cpf, records)
    if resolve_status(profile) is ClientStatus.INELIGIBLE:
        logger.warning(
            "New purchase blocked for ineligible client",
            extra={"cpf": normalized_cpf, "step": "eligibility_gate"},
        )
        raise ValidationRejected(NOT_ELIGIBLE)
    return profile


def transition(current: ClientStatus, target: ClientStatus) -> ClientStatus:
    """
    Record a reviewer-triggered transition and return the new status.

    Every transition is allowed, so nothing is checked here; a change is
    logged and setting the current state again is a silent no-op.
    """
    if current is not target:
        logger.info(
            "Client status transition",
            extra={"from_status": current.value, "to_status": target.value},
        )
    return target


def status_after_create(policy: str) -> ClientStatus:
    """Status stamped on a freshly created purchase, from configuration"""
    return ClientStatus.parse(policy)


def requires_post_create_lock(policy: str) -> bool:
    """The automatic cascade only runs when creation locks the identity"""
    return status_after_create(policy) is ClientStatus.INELIGIBLE
