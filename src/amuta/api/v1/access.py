"""Access guard endpoint - the decision clients render for protected screens."""

from fastapi import APIRouter

from src.amuta.api.dependencies import Access
from src.amuta.core.permissions import Permission
from src.amuta.schemas import AccessDecisionRead
from src.amuta.services import check_permission

router = APIRouter(prefix="/access", tags=["access"])


@router.get(
    "",
    response_model=AccessDecisionRead,
    summary="Evaluate access",
    description=(
        "Run the access guard for the selected organization. Always 200; blocked "
        "decisions carry a reason and a recovery action. With `permission`, the "
        "decision also reflects that permission under the configured policy."
    ),
)
async def get_access(context: Access, permission: Permission | None = None) -> AccessDecisionRead:
    decision = context.decision
    response = AccessDecisionRead(
        state=decision.state.value,
        allowed=decision.allowed,
        reason=decision.reason,
        recovery_action=decision.recovery_action,
        organization_id=context.selection.as_stored(),
        permissions=sorted(p.value for p in context.permissions),
    )
    if permission is not None and decision.allowed:
        outcome = check_permission(decision, context.permissions, permission)
        if not outcome.allowed:
            response.allowed = False
            response.reason = outcome.reason
    return response
