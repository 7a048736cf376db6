"""
Hospital Auth - Role-Based Access Control (RBAC)

Server-side permission checks based on the roles carried by the session
token. Policies are defined in policies.yaml and enforced at the route
level.

Security:
- Deny-by-default: All actions require explicit permission
- Roles are free-form labels; an account holds a set of them and is
  granted the union of their permissions
- Role hierarchy is NOT inherited (explicit grants only)
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

import yaml
from fastapi import Depends

from hospital_auth.auth.dependencies import AuthenticatedAccount, get_current_account
from hospital_auth.errors import InsufficientRole


logger = logging.getLogger(__name__)

DEFAULT_POLICY_PATH = Path(__file__).parent / "policies.yaml"


class Permission(str, Enum):
    """Granular permissions for API actions."""
    # Profile
    READ_PROFILE = "read:profile"

    # Hospital data (patients, stays, beds, rooms, services)
    READ_PATIENTS = "read:patients"
    WRITE_PATIENTS = "write:patients"
    READ_STAYS = "read:stays"
    WRITE_STAYS = "write:stays"
    VALIDATE_ARRIVAL = "validate:arrival"

    # Account management
    MANAGE_USERS = "manage:users"


class RBACPolicy:
    """
    Manages role-to-permission mappings loaded from policies.yaml.

    Shared instance via RBACPolicy.default(); tests can build their own
    from a different file.
    """

    _default: Optional["RBACPolicy"] = None

    def __init__(self, policy_path: Optional[Path] = None):
        self._policies: Dict[str, Set[str]] = self._load_policies(policy_path or DEFAULT_POLICY_PATH)

    @classmethod
    def default(cls) -> "RBACPolicy":
        if cls._default is None:
            cls._default = cls()
        return cls._default

    @staticmethod
    def _load_policies(policy_path: Path) -> Dict[str, Set[str]]:
        """Load policies from YAML configuration file."""
        if not policy_path.exists():
            # Default deny-all if no policy file
            logger.warning("RBAC policy file %s not found; denying all permissions", policy_path)
            return {}

        with open(policy_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        return {
            role: set(perms or [])
            for role, perms in (config.get("roles") or {}).items()
        }

    def permissions_for(self, roles: Iterable[str]) -> Set[str]:
        """Union of the permissions granted by each role."""
        granted: Set[str] = set()
        for role in roles:
            granted |= self._policies.get(role, set())
        return granted

    def has_permission(self, roles: Iterable[str], permission: Permission) -> bool:
        """
        Check if any of the given roles grants a permission.

        Returns:
            True if permitted, False otherwise (deny-by-default)
        """
        return permission.value in self.permissions_for(roles)


def require_permission(permission: Permission):
    """
    Dependency factory enforcing a permission on a route.

    Usage:
        @router.get("/users")
        async def list_users(
            account: AuthenticatedAccount = Depends(require_permission(Permission.MANAGE_USERS)),
        ):
            ...

    Raises:
        Unauthenticated / Forbidden: from the session guard
        InsufficientRole: valid token whose roles lack the permission
    """
    async def dependency(
        account: AuthenticatedAccount = Depends(get_current_account),
    ) -> AuthenticatedAccount:
        if not RBACPolicy.default().has_permission(account.roles, permission):
            logger.info(
                "Permission %s denied for account %s (roles=%s)",
                permission.value, account.id, sorted(account.roles),
            )
            raise InsufficientRole()
        return account

    return dependency
