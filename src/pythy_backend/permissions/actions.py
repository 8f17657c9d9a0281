import logging
from enum import Enum
from typing import Union

from pythy_backend.permissions.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"
    manage_course = "manage_course"
    manage_assignments = "manage_assignments"
    grade_submissions = "grade_submissions"
    view_other_submissions = "view_other_submissions"
    impersonate = "impersonate"


def parse_action(action: Union[Action, str]) -> Action:
    """Normalize an action name; names outside the catalog are caller errors"""
    if isinstance(action, Action):
        return action
    try:
        return Action(action)
    except ValueError:
        logger.error(f"Unknown action '{action}'")
        raise ConfigurationError(f"Unknown action '{action}'")
