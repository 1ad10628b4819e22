# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Authorization policy — one capability table, one gate.

Each action maps to the roles allowed to perform it. Routes declare the
action they need; nothing else in the code base compares role strings for
access decisions.
"""

from typing import Dict, FrozenSet

from chama.core.errors import InsufficientRole

MEMBER = "member"
SECRETARY = "secretary"
TREASURER = "treasurer"
CHAIRPERSON = "chairperson"
SUPERVISORY = "supervisorycommittee"
COMMITTEE = "committeemember"

ROLES: tuple[str, ...] = (MEMBER, SECRETARY, TREASURER, CHAIRPERSON, SUPERVISORY, COMMITTEE)
ADMIN_ROLES: FrozenSet[str] = frozenset(ROLES) - {MEMBER}
ALL_ROLES: FrozenSet[str] = frozenset(ROLES)

CAPABILITIES: Dict[str, FrozenSet[str]] = {
    # Members
    "members:list": ADMIN_ROLES,
    "members:update": frozenset({CHAIRPERSON}),       # plus self
    "members:promote": frozenset({CHAIRPERSON}),
    "members:reset_pin": frozenset({CHAIRPERSON}),
    "members:remove": frozenset({CHAIRPERSON}),
    # Loans
    "loans:review": frozenset({TREASURER, SECRETARY, CHAIRPERSON}),
    # Chair queue
    "queue:read": ADMIN_ROLES,
    "queue:submit:Minutes": frozenset({SECRETARY}),
    "queue:submit:Loan": frozenset({TREASURER}),
    "queue:submit:Report": frozenset({TREASURER}),
    "queue:approve": frozenset({CHAIRPERSON}),
    "queue:discard": frozenset({CHAIRPERSON}),
    # Polls
    "polls:create": frozenset({SECRETARY, CHAIRPERSON}),
    "polls:manage": frozenset({SECRETARY, CHAIRPERSON}),
    "polls:vote": ALL_ROLES,
    # Publications
    "news:publish": frozenset({SECRETARY, CHAIRPERSON}),
    "reports:publish": frozenset({CHAIRPERSON}),
    "signatures:any": frozenset({CHAIRPERSON}),       # plus own role
    # Member-scoped records: everyone reads their own, these roles read all
    "records:read_all": ADMIN_ROLES,
    "transactions:record": frozenset({TREASURER}),
    "notifications:send": ADMIN_ROLES,
    "notifications:manage": ADMIN_ROLES,              # plus owner
    # Audit log and export
    "logs:read": ADMIN_ROLES,
    "logs:write": ADMIN_ROLES,
    "export": frozenset({SUPERVISORY}),
}


class Policy:
    def __init__(self, capabilities: Dict[str, FrozenSet[str]]):
        self._capabilities = capabilities

    def roles_for(self, action: str) -> FrozenSet[str]:
        try:
            return self._capabilities[action]
        except KeyError:
            raise KeyError(f"No capability registered for action '{action}'")

    def allows(self, role: str, action: str) -> bool:
        return role in self.roles_for(action)

    def check(self, principal, action: str) -> None:
        if not self.allows(principal.role, action):
            raise InsufficientRole(f"Role '{principal.role}' may not perform {action}")

    def allows_self(self, principal, action: str, owner_email: str) -> bool:
        """The owner of a record, or any role granted ``action``."""
        if owner_email and principal.email.lower() == owner_email.lower():
            return True
        return self.allows(principal.role, action)

    def check_self(self, principal, action: str, owner_email: str) -> None:
        if not self.allows_self(principal, action, owner_email):
            raise InsufficientRole(f"Role '{principal.role}' may not perform {action}")

    def scope(self, principal, action: str, requested: str | None) -> str | None:
        """Member filter for a read: roles granted ``action`` may ask for anyone, others get themselves."""
        if self.allows(principal.role, action):
            return requested
        return principal.email


POLICY = Policy(CAPABILITIES)
