"""
Hospital Auth - Client Package

Client-side half of the auth core, as used by the mobile app's screens:
session storage, the API client, the login state machine and role-gated
navigation.
"""

from hospital_auth.client.api import HospitalApiClient, Profile, StaleResponseError
from hospital_auth.client.login import AuthState, LoginController
from hospital_auth.client.role_gate import MenuItem, RoleGate, visible_menu_items
from hospital_auth.client.session_store import SessionStore
from hospital_auth.client.storage import FileStorage, MemoryStorage

__all__ = [
    "HospitalApiClient",
    "Profile",
    "StaleResponseError",
    "AuthState",
    "LoginController",
    "MenuItem",
    "RoleGate",
    "visible_menu_items",
    "SessionStore",
    "FileStorage",
    "MemoryStorage",
]
