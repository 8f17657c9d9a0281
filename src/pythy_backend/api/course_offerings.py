from typing import Annotated, List
from fastapi import APIRouter, Depends

from pythy_backend.api.auth import get_current_ability
from pythy_backend.interface.course_offerings import CourseOfferingList
from pythy_backend.model.course import CourseOffering
from pythy_backend.permissions.ability import Ability

course_offering_router = APIRouter()

@course_offering_router.get("", response_model=List[CourseOfferingList])
def list_course_offerings(ability: Annotated[Ability, Depends(get_current_ability)]):
    """Offerings the current identity is enrolled in"""
    return ability.accessible_course_offerings().order_by(CourseOffering.id).all()

@course_offering_router.get("/managing", response_model=List[CourseOfferingList])
def list_managing_course_offerings(ability: Annotated[Ability, Depends(get_current_ability)]):
    """Offerings the current identity can manage"""
    return ability.managing_course_offerings().order_by(CourseOffering.id).all()
