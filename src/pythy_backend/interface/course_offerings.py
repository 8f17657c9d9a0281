from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class CourseOfferingList(BaseModel):
    id: str = Field(description="Course offering unique identifier")
    course_id: str = Field(description="Course the offering belongs to")
    term: Optional[str] = Field(None, description="Term of the offering")
    label: Optional[str] = Field(None, description="Section label")

    model_config = ConfigDict(from_attributes=True)
