# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: member identity — registration, PIN login, session tokens,
role promotion and PIN reset.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from chama.core.errors import (
    DuplicateIdentity, InsufficientRole, InvalidCredentials, InvalidInput,
    InvalidRole, InvalidToken, MissingToken, NotFound,
)
from chama.core.logging import get_logger
from chama.core.policy import ADMIN_ROLES, MEMBER, POLICY, ROLES
from chama.core.security import (
    decode_token, hash_pin, is_valid_email, is_valid_pin, issue_token,
)
from chama.metrics import AUTH_ATTEMPTS
from chama.repositories.base import CollectionStore
from chama.repositories.names import MEMBERS
from chama.schemas import Principal

logger = get_logger(__name__)


def public_view(member: Dict[str, Any]) -> Dict[str, Any]:
    """A member record without its PIN digest."""
    return {k: v for k, v in member.items() if k != "hashed_pin"}


class IdentityService:
    """Owns the ``members`` collection and the session token format."""

    def __init__(self, store: CollectionStore, secret: str,
                 token_ttl_seconds: int = 3600, reset_pin: str = "0000",
                 algorithm: str = "HS256") -> None:
        self._store = store
        self._secret = secret
        self._ttl = token_ttl_seconds
        self._reset_pin = reset_pin
        self._algorithm = algorithm

    # ── Commands ──

    def register(self, name: str, email: str, pin: str) -> Dict[str, Any]:
        """Create a member with role ``member``. Raises InvalidInput / DuplicateIdentity."""
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name:
            raise InvalidInput("Name is required")
        if not is_valid_email(email):
            raise InvalidInput("Email address is not valid")
        if not is_valid_pin(pin):
            raise InvalidInput("PIN must be exactly 4 digits")

        members, revision = self._store.snapshot(MEMBERS)
        for m in members:
            if m.get("email", "").lower() == email:
                raise DuplicateIdentity(f"A member with email {email} already exists")
            if m.get("name", "").lower() == name.lower():
                raise DuplicateIdentity(f"A member named {name} already exists")

        member = {
            "id": str(uuid.uuid4()),
            "name": name,
            "email": email,
            "hashed_pin": hash_pin(pin),
            "role": MEMBER,
            "must_change_pin": False,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        members.append(member)
        self._store.save(MEMBERS, members, expected_revision=revision)
        logger.info("Member registered: %s", email)
        return public_view(member)

    def authenticate(self, email: str, pin: str) -> Dict[str, Any]:
        """Return ``{user, token, must_change_pin}``. Raises InvalidCredentials."""
        email = (email or "").strip().lower()
        member = self._find(self._store.load(MEMBERS), email)
        if member is None or member.get("hashed_pin") != hash_pin(pin or ""):
            AUTH_ATTEMPTS.labels(outcome="rejected").inc()
            logger.warning("Failed login for %s", email)
            raise InvalidCredentials()

        user = Principal(name=member["name"], email=member["email"], role=member.get("role", MEMBER))
        token = issue_token(user.model_dump(), self._secret, self._ttl, self._algorithm)
        AUTH_ATTEMPTS.labels(outcome="accepted").inc()
        return {
            "user": user.model_dump(),
            "token": token,
            "must_change_pin": bool(member.get("must_change_pin")),
        }

    def authorize(self, token: Optional[str],
                  required_roles: Optional[Iterable[str]] = None) -> Principal:
        """Validate a session token and, optionally, the caller's role."""
        if not token:
            raise MissingToken()
        claims = decode_token(token, self._secret, self._algorithm)
        try:
            principal = Principal(name=claims["name"], email=claims["email"], role=claims["role"])
        except KeyError:
            raise InvalidToken()
        if required_roles is not None and principal.role not in set(required_roles):
            raise InsufficientRole()
        return principal

    def update_member(self, actor: Principal, email: str, name: Optional[str] = None,
                      new_pin: Optional[str] = None) -> Dict[str, Any]:
        """Self-service edit, or chairperson edit of anyone."""
        email = email.strip().lower()
        POLICY.check_self(actor, "members:update", email)
        members, revision = self._store.snapshot(MEMBERS)
        member = self._require(members, email)

        if name is not None:
            name = name.strip()
            if not name:
                raise InvalidInput("Name cannot be blank")
            clash = any(
                m.get("name", "").lower() == name.lower() and m["email"] != email
                for m in members
            )
            if clash:
                raise DuplicateIdentity(f"A member named {name} already exists")
            member["name"] = name
        if new_pin is not None:
            if not is_valid_pin(new_pin):
                raise InvalidInput("PIN must be exactly 4 digits")
            member["hashed_pin"] = hash_pin(new_pin)
            member["must_change_pin"] = False

        self._store.save(MEMBERS, members, expected_revision=revision)
        logger.info("Member %s updated by %s", email, actor.email)
        return public_view(member)

    def promote(self, actor_role: str, target_email: str, new_role: str) -> Dict[str, Any]:
        if actor_role not in POLICY.roles_for("members:promote"):
            raise InsufficientRole("Only the chairperson can change roles")
        if new_role not in ADMIN_ROLES:
            raise InvalidRole(f"role must be one of {sorted(ADMIN_ROLES)}")

        target_email = target_email.strip().lower()
        members, revision = self._store.snapshot(MEMBERS)
        member = self._require(members, target_email)
        previous = member.get("role", MEMBER)
        member["role"] = new_role
        self._store.save(MEMBERS, members, expected_revision=revision)
        logger.info("Member %s promoted %s -> %s", target_email, previous, new_role)
        return public_view(member)

    def reset_pin(self, email: str) -> Dict[str, Any]:
        """
        Reset a PIN to the configured fallback value. The fallback is well
        known, so the member is flagged to change it and the new PIN must be
        passed on out of band.
        """
        email = email.strip().lower()
        members, revision = self._store.snapshot(MEMBERS)
        member = self._require(members, email)
        member["hashed_pin"] = hash_pin(self._reset_pin)
        member["must_change_pin"] = True
        self._store.save(MEMBERS, members, expected_revision=revision)
        logger.warning("PIN for %s reset to the fallback value; deliver it out of band", email)
        return public_view(member)

    def remove(self, email: str) -> Dict[str, Any]:
        email = email.strip().lower()
        members, revision = self._store.snapshot(MEMBERS)
        member = self._require(members, email)
        members.remove(member)
        self._store.save(MEMBERS, members, expected_revision=revision)
        logger.info("Member %s removed", email)
        return public_view(member)

    # ── Queries ──

    def list_members(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        if role is not None and role not in ROLES:
            raise InvalidRole(f"role must be one of {list(ROLES)}")
        members = self._store.load(MEMBERS)
        if role:
            members = [m for m in members if m.get("role", MEMBER) == role]
        return [public_view(m) for m in members]

    def get_member(self, email: str) -> Dict[str, Any]:
        return public_view(self._require(self._store.load(MEMBERS), email.strip().lower()))

    # ── Private ──

    @staticmethod
    def _find(members: List[Dict[str, Any]], email: str) -> Optional[Dict[str, Any]]:
        return next((m for m in members if m.get("email", "").lower() == email), None)

    def _require(self, members: List[Dict[str, Any]], email: str) -> Dict[str, Any]:
        member = self._find(members, email)
        if member is None:
            raise NotFound(f"No member with email {email}")
        return member
