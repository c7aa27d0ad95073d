from pydantic import BaseModel


class AccessDecisionRead(BaseModel):
    """Guard decision rendered by clients (block reason plus recovery action)."""

    state: str
    allowed: bool
    reason: str | None = None
    recovery_action: str | None = None
    organization_id: str | None = None
    permissions: list[str] = []
