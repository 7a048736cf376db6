"""
Hospital Auth

Authentication and role-based authorization core of the hospital stay
manager: credential verification and stateless session tokens on the
server, session storage and role-gated navigation on the client.
"""

__version__ = "0.1.0"
