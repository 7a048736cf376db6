"""
Hospital Auth - Role Gate

Decides which navigation entries an account may see from its role set.

Roles are free-form labels: an entry lists the roles that unlock it and
visibility is a set intersection, so new roles only need menu.yaml
changes. The role set comes from /profile, never from the stored token.
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

import yaml
from pydantic import BaseModel, Field

from hospital_auth.client.api import HospitalApiClient


logger = logging.getLogger(__name__)

DEFAULT_MENU_PATH = Path(__file__).parent / "menu.yaml"


class MenuItem(BaseModel):
    """
    Navigation entry.

    Attributes:
        key: Stable identifier
        label: Text shown in the menu
        screen: Navigation target
        roles: Roles unlocking the entry; empty means any authenticated account
    """
    key: str
    label: str
    screen: str
    roles: FrozenSet[str] = Field(default_factory=frozenset)

    def visible_to(self, roles: FrozenSet[str]) -> bool:
        return not self.roles or bool(self.roles & roles)


def load_menu(path: Optional[Path] = None) -> List[MenuItem]:
    """Load menu entries from YAML, keeping file order."""
    with open(path or DEFAULT_MENU_PATH, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    return [MenuItem(**item) for item in config.get("items") or []]


_default_menu: Optional[List[MenuItem]] = None


def default_menu() -> List[MenuItem]:
    global _default_menu
    if _default_menu is None:
        _default_menu = load_menu()
    return _default_menu


def visible_menu_items(roles: Iterable[str], menu: Optional[List[MenuItem]] = None) -> List[MenuItem]:
    """Entries visible to an account holding `roles`, in menu order."""
    role_set = frozenset(roles)
    return [item for item in (menu if menu is not None else default_menu()) if item.visible_to(role_set)]


class RoleGate:
    """
    Holds the role set of the current screen and re-evaluates the menu
    each time the profile is fetched.
    """

    def __init__(self, api: HospitalApiClient, menu: Optional[List[MenuItem]] = None):
        self.api = api
        self.menu = menu if menu is not None else default_menu()
        self.roles: FrozenSet[str] = frozenset()

    def refresh(self) -> List[MenuItem]:
        """
        Fetch /profile and recompute visibility.

        Errors from the API propagate; on a rejected token the session
        store has already been cleared and the role set is emptied here.
        """
        try:
            profile = self.api.get_profile()
        except Exception:
            self.roles = frozenset()
            raise
        self.roles = frozenset(profile.roles)
        logger.debug("Role gate refreshed for account %s: %s", profile.id, sorted(self.roles))
        return self.visible_items

    @property
    def visible_items(self) -> List[MenuItem]:
        return visible_menu_items(self.roles, self.menu)

    def can_access(self, screen: str) -> bool:
        """Whether a screen is reachable through a visible entry."""
        return any(item.screen == screen for item in self.visible_items)
