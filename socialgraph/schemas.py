"""
Pydantic request / response schemas for the API layer.
Kept separate from the stored records in models.py so the wire shape can
evolve without touching the keyspace.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ──────────────────────────── Auth ────────────────────────────────────────

class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=8, max_length=100)
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    fullname: Optional[str] = Field(None, max_length=100, alias="fullName")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    username: str
    uid: str
    token: str
    token_type: str = "Bearer"
    expires_in: int
    followers: int = 0
    following: int = 0


# ──────────────────────────── Users ───────────────────────────────────────

class UserResponse(BaseModel):
    uid: str
    username: str
    fullname: Optional[str] = None
    email: Optional[str] = None
    followers: int = 0
    following: int = 0
    profile_picture: Optional[str] = None


class FollowRequest(BaseModel):
    uid: Optional[str] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50)

    @model_validator(mode="after")
    def _one_target(self) -> "FollowRequest":
        if not self.uid and not self.username:
            raise ValueError("Either uid or username is required")
        return self


class Member(BaseModel):
    uid: str
    username: str
    fullname: Optional[str] = None


class MembersResponse(BaseModel):
    members: list[Member]
    count: int
    duration: float  # milliseconds


# ──────────────────────────── Posts ───────────────────────────────────────

class StatusRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    type: str = "text"  # unknown values are stored as text
    url: Optional[str] = None
    md5: Optional[str] = None


class ReshareRequest(BaseModel):
    uuid: str = Field(..., min_length=1)


class PostResponse(BaseModel):
    id: str
    type: str
    uid: str
    content: str
    url: str
    created: str


class ActionRequest(BaseModel):
    uuid: str = Field(..., min_length=1, description="Post id")


class ActionActor(BaseModel):
    type: str = "person"
    uuid: str
    username: Optional[str] = None
    display_name: Optional[str] = None


class ActionListResponse(BaseModel):
    object: str
    actors: list[ActionActor]
    count: int
    duration: float


# ──────────────────────────── Timeline ────────────────────────────────────

class Activity(BaseModel):
    uuid: str
    type: str
    content: Optional[str] = None
    url: Optional[str] = None
    created: Optional[str] = None
    md5: Optional[str] = None
    is_liked: bool = False
    is_loved: bool = False
    is_faved: bool = False


class Actor(BaseModel):
    uuid: str
    username: Optional[str] = None
    fullname: Optional[str] = None


class TimelineEntity(BaseModel):
    activity: Activity
    actor: Optional[Actor] = None


class TimelineResponse(BaseModel):
    entities: list[TimelineEntity]
    count: int
    duration: float
