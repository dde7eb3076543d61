"""
Role Enumeration Module
=======================

Defines all valid roles in the system.

Roles are independent flags: an account holds a set of zero or more
of them. The empty set is meaningful and marks an account that is
still awaiting approval.

Security Purpose:
- Prevents arbitrary role injection
- Prevents frontend role manipulation
- Enforces strict backend validation
"""

from enum import Enum


class Role(str, Enum):
    """
    System-wide allowed roles.
    """

    USER = "USER"
    EDITOR = "EDITOR"
    JOURNALIST = "JOURNALIST"
    OFFICIAL = "OFFICIAL"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
