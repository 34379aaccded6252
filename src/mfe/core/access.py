from __future__ import annotations

from mfe.contracts import ActionType, CallerIdentity, Role
from mfe.core.errors import AccessDeniedError

DEFAULT_POLICY: dict[ActionType, frozenset[Role]] = {
    ActionType.CREATE_MATCH: frozenset({Role.ADMIN}),
    ActionType.TRIGGER_NEXT_SEGMENT: frozenset({Role.ADMIN}),
    ActionType.FORCE_FAIL: frozenset({Role.ADMIN}),
    ActionType.CONFIGURE_RANDOMNESS: frozenset({Role.ADMIN}),
    ActionType.FULFILL_RANDOMNESS: frozenset({Role.ORACLE}),
}


class AccessPolicy:
    """Explicit action -> allowed roles table. Read-only actions are open."""

    def __init__(
        self,
        role_grants: dict[str, list[Role]],
        policy: dict[ActionType, frozenset[Role]] | None = None,
    ) -> None:
        self._grants = {caller: frozenset(roles) for caller, roles in role_grants.items()}
        self._policy = dict(policy or DEFAULT_POLICY)

    def identity(self, caller_id: str) -> CallerIdentity:
        return CallerIdentity(caller_id=caller_id, roles=self._grants.get(caller_id, frozenset()))

    def require(self, caller: CallerIdentity, action: ActionType) -> None:
        allowed = self._policy.get(action)
        if allowed is None:
            return
        if not (caller.roles & allowed):
            raise AccessDeniedError(f"caller '{caller.caller_id}' may not perform {action.value}")
