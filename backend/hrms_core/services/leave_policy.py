from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from hrms_core.config import Settings, get_settings
from hrms_core.schemas.leave import LeavePolicy

if TYPE_CHECKING:
    import uuid

    from hrms_core.services.leave_store import LeaveStore

logger = logging.getLogger(__name__)


def default_leave_policy(settings: Settings | None = None) -> LeavePolicy:
    """Deployment-wide policy from configuration."""
    settings = settings or get_settings()
    return LeavePolicy(
        carry_forward=False,
        annual_reset=True,
        paid_leave_allocation=settings.leave_paid_allocation,
        sick_leave_allocation=settings.leave_sick_allocation,
        year_start_month=settings.leave_year_start_month,
    )


async def get_leave_policy(store: LeaveStore, company_id: uuid.UUID) -> LeavePolicy:
    """Default policy with any company overrides applied.

    Carry-forward stays disabled whatever the override says.
    """
    policy = default_leave_policy()
    override = await store.get_policy_override(company_id)
    if override is None:
        return policy

    if override.carry_forward:
        logger.warning("Ignoring carry-forward override for company %s: not supported", company_id)

    updates: dict[str, object] = {}
    if override.paid_leave_allocation is not None:
        updates["paid_leave_allocation"] = override.paid_leave_allocation
    if override.sick_leave_allocation is not None:
        updates["sick_leave_allocation"] = override.sick_leave_allocation
    if override.year_start_month is not None:
        updates["year_start_month"] = override.year_start_month
    try:
        return LeavePolicy.model_validate({**policy.model_dump(), **updates})
    except ValidationError:
        logger.warning("Invalid leave policy override for company %s, using defaults", company_id)
        return policy
