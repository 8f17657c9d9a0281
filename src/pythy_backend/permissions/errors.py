"""
Authorization error taxonomy.

Forbidden and InvalidState are user-facing and render as HTTP responses.
PolicyNotDefined never leaves the ability; it is converted to a deny and
logged. ConfigurationError is a programmer error and is never recovered.
"""

from typing import Optional
from pythy_backend.api.exceptions import ConflictException, ForbiddenException


class Forbidden(ForbiddenException):
    """The actor lacks a required global privilege"""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or "Forbidden")


class InvalidState(ConflictException):
    """The operation is not allowed from the current session state"""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or "Invalid state")


class PolicyNotDefined(Exception):
    """No rule exists for an action/resource combination"""

    def __init__(self, action: str, resource_name: str):
        super().__init__(f"No policy defined for '{action}' on '{resource_name}'")
        self.action = action
        self.resource_name = resource_name


class ConfigurationError(Exception):
    """An unknown role, capability or action name was referenced"""
    pass
