from pydantic import BaseModel, ConfigDict, Field, field_validator

from waypoint.constants import Roles

class LoginRequest(BaseModel):
    username: str
    password: str

class UserCreate(BaseModel):
    name: str
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: str = Roles.DEVELOPER

    @field_validator("role")
    @classmethod
    def check_role(cls, value: str) -> str:
        value = value.lower()
        if value not in Roles.ALL_ROLES:
            raise ValueError(f"Invalid role. Allowed roles: {Roles.ALL_ROLES}")
        return value

class PasswordUpdate(BaseModel):
    password: str = Field(..., min_length=1)

class UserResponse(BaseModel):
    id: int
    name: str
    username: str
    role: str

    model_config = ConfigDict(from_attributes=True)

class LoginResponse(BaseModel):
    username: str
    role: str
    name: str
    accessToken: str
