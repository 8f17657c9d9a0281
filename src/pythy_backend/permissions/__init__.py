"""
Authorization and scoping engine for the course hierarchy.

Main components:
- catalog: fixed global roles and course role capability bundles
- institutions: e-mail domain to institution matching
- bootstrap: first-user administrator bootstrap and setup mode
- ability: immutable per-request capability snapshot
- handlers / handlers_impl: per-entity policy rules and registry
- query_builders: scoped listing queries
- impersonation: administrator identity substitution
- core: handler registration and ability computation
"""

from .errors import Forbidden, InvalidState, PolicyNotDefined, ConfigurationError
from .actions import Action, parse_action
from .catalog import RoleCatalog, GlobalRoleName, CourseRoleName, role_catalog
from .institutions import InstitutionDomainResolver
from .bootstrap import BootstrapPolicy
from .ability import Ability, AbilityBuilder
from .impersonation import ImpersonationSession, ImpersonationRegistry, SessionState, impersonation_registry
from .core import compute_ability, check_admin, initialize_permission_handlers

__all__ = [
    # Errors
    "Forbidden",
    "InvalidState",
    "PolicyNotDefined",
    "ConfigurationError",
    # Catalog
    "Action",
    "parse_action",
    "RoleCatalog",
    "GlobalRoleName",
    "CourseRoleName",
    "role_catalog",
    # User creation
    "InstitutionDomainResolver",
    "BootstrapPolicy",
    # Abilities
    "Ability",
    "AbilityBuilder",
    "compute_ability",
    "check_admin",
    "initialize_permission_handlers",
    # Impersonation
    "ImpersonationSession",
    "ImpersonationRegistry",
    "SessionState",
    "impersonation_registry",
]
