from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, TYPE_CHECKING
from sqlalchemy.orm import Session, Query

from pythy_backend.permissions.actions import Action
from pythy_backend.permissions.errors import Forbidden, PolicyNotDefined

if TYPE_CHECKING:
    from pythy_backend.permissions.ability import Ability


class PermissionHandler(ABC):
    """Base class for entity-specific permission handlers"""

    def __init__(self, entity: Type[Any]):
        self.entity = entity
        self.resource_name = entity.__tablename__

    @abstractmethod
    def can_perform_action(self, ability: "Ability", action: Action, resource: Any) -> bool:
        """Decide a single action on a resource instance.

        Args:
            ability: Snapshot of the acting identity (never an administrator here)
            action: Catalog action
            resource: Model instance, persisted or transient

        Raises:
            PolicyNotDefined: No rule exists for this action on this entity
        """
        pass

    @abstractmethod
    def build_query(self, ability: "Ability", action: Action, db: Session) -> Query:
        """Build a query of the entity rows the ability may perform ``action`` on"""
        pass

    def undefined(self, action: Action) -> PolicyNotDefined:
        return PolicyNotDefined(action.value, self.resource_name)

    def forbidden(self, action: Action) -> Forbidden:
        return Forbidden(f"'{action.value}' is not permitted on '{self.resource_name}'")


class PermissionRegistry:
    """Registry for managing entity permission handlers"""

    _instance = None
    _handlers: Dict[Type[Any], PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, entity: Type[Any], handler: PermissionHandler):
        """Register a permission handler for an entity"""
        self._handlers[entity] = handler

    def get_handler(self, entity: Type[Any]) -> Optional[PermissionHandler]:
        """Get the permission handler for an entity"""
        return self._handlers.get(entity)


# Global registry instance
permission_registry = PermissionRegistry()
