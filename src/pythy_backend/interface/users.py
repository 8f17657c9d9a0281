from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from typing import Optional

class UserCreate(BaseModel):
    email: EmailStr = Field(description="User's email address")
    first_name: Optional[str] = Field(None, min_length=1, max_length=255, description="User's first name")
    last_name: Optional[str] = Field(None, min_length=1, max_length=255, description="User's last name")

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty or only whitespace')
        return v.strip() if v else v

class UserGet(BaseModel):
    id: str = Field(description="User unique identifier")
    email: str = Field(description="User's email address")
    first_name: Optional[str] = Field(None, description="User's first name")
    last_name: Optional[str] = Field(None, description="User's last name")
    display_name: str = Field(description="Full name, or the email address when no name is known")
    global_role_id: Optional[str] = Field(None, description="Global role of the user")
    institution_id: Optional[str] = Field(None, description="Institution matched from the email domain")

    model_config = ConfigDict(from_attributes=True)

class CurrentUserGet(BaseModel):
    user: UserGet = Field(description="Identity currently in effect")
    true_actor: UserGet = Field(description="Authenticated identity")
    impersonating: bool = Field(description="Whether the effective identity is impersonated")
