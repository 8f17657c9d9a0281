from pydantic import BaseModel, Field
from typing import Optional

class SetupStatus(BaseModel):
    setup_required: bool = Field(description="True until the first user has been created")

class ImpersonationStatus(BaseModel):
    impersonating: bool = Field(description="Whether a target identity is in effect")
    true_actor_id: str = Field(description="Authenticated administrator")
    effective_actor_id: str = Field(description="Identity whose abilities are in effect")
    target_email: Optional[str] = Field(None, description="Email of the impersonated user")
