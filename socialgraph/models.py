"""
Domain records stored in the keyspace.

Records:
  User  — profile hash at user:{uid}
  Post  — post hash at post:{id}

Enums carry the small attribute tables the engines dispatch on:
  Action     — like / love / fav / share
  Relation   — followers / following / friends / blocked / blockers / muted / muters
  Importance — personal / everyone
  PostType   — text / photo / video
"""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional


def new_id() -> str:
    return str(uuid.uuid4())


def _parse_int(value: Optional[str]) -> int:
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


# ─────────────────────────── Enums ────────────────────────────────────────

class Action(Enum):
    LIKE = (":likes", "like", "likes", "liked")
    LOVE = (":loves", "love", "loves", "loved")
    FAV = (":favs", "fav", "faves", "faved")
    SHARE = (":shares", "share", "shares", "shared")

    def __init__(self, key: str, noun: str, plural: str, past_tense: str):
        self.key = key
        self.noun = noun
        self.plural = plural
        self.past_tense = past_tense

    @classmethod
    def parse(cls, value: str) -> "Action":
        lowered = value.lower()
        for action in cls:
            if lowered in (action.noun, action.plural, action.name.lower()):
                return action
        raise ValueError(f"Unknown action: {value}")

    @property
    def performed_key(self) -> str:
        return f"{self.past_tense}Post"

    @property
    def already_key(self) -> str:
        return f"already{self.past_tense.capitalize()}Post"

    @property
    def reversed_key(self) -> str:
        return f"un{self.past_tense}Post"

    @property
    def cannot_reverse_key(self) -> str:
        return f"cannotUn{self.noun}"


class Relation(str, Enum):
    FOLLOWERS = "followers"
    FOLLOWING = "following"
    FRIENDS = "friends"
    BLOCKED = "blocked"
    BLOCKERS = "blockers"
    MUTED = "muted"
    MUTERS = "muters"


class Importance(str, Enum):
    PERSONAL = "personal"
    EVERYONE = "everyone"


class PostType(str, Enum):
    TEXT = "text"
    PHOTO = "photo"
    VIDEO = "video"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PostType":
        # unknown or missing types degrade to text
        if value:
            for t in cls:
                if t.value == value.lower():
                    return t
        return cls.TEXT


# ─────────────────────────── Records ──────────────────────────────────────

@dataclass
class User:
    uid: str
    username: str
    email: Optional[str] = None
    fullname: Optional[str] = None
    password_hash: Optional[str] = None
    poly: Optional[str] = None
    followers: int = 0
    following: int = 0
    poly_count: int = 0
    profile_picture: Optional[str] = None
    activated: bool = False
    banned: bool = False

    @classmethod
    def from_map(cls, data: dict[str, str]) -> "User":
        return cls(
            uid=data.get("uid", ""),
            username=data.get("username", ""),
            email=data.get("email"),
            fullname=data.get("fullname"),
            password_hash=data.get("passwordHash"),
            poly=data.get("poly"),
            followers=_parse_int(data.get("followers")),
            following=_parse_int(data.get("following")),
            poly_count=_parse_int(data.get("polyCount")),
            profile_picture=data.get("profilePicture"),
            activated=data.get("activated", "").lower() == "true",
            banned=data.get("banned", "").lower() == "true",
        )

    def to_map(self) -> dict[str, str]:
        data = {
            "uid": self.uid,
            "username": self.username,
            "followers": str(self.followers),
            "following": str(self.following),
            "polyCount": str(self.poly_count),
            "activated": str(self.activated).lower(),
        }
        optional = {
            "email": self.email,
            "fullname": self.fullname,
            "passwordHash": self.password_hash,
            "poly": self.poly,
            "profilePicture": self.profile_picture,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.banned:
            data["banned"] = "true"
        return data


@dataclass
class Post:
    """
    A status update. `created` is epoch seconds kept as the string the
    hash stores. The four counters are display hints only; the action
    lists under post:{id}:{plural} are authoritative.
    """

    id: str
    uid: str
    type: str = PostType.TEXT.value
    content: Optional[str] = None
    url: Optional[str] = None
    md5: Optional[str] = None
    created: Optional[str] = None
    likes: int = 0
    loves: int = 0
    favs: int = 0
    shares: int = 0

    @classmethod
    def from_map(cls, data: dict[str, str]) -> "Post":
        return cls(
            id=data.get("id", ""),
            uid=data.get("uid", ""),
            type=data.get("type") or PostType.TEXT.value,
            content=data.get("content"),
            url=data.get("url"),
            md5=data.get("md5"),
            created=data.get("created"),
            likes=_parse_int(data.get("likes")),
            loves=_parse_int(data.get("loves")),
            favs=_parse_int(data.get("favs")),
            shares=_parse_int(data.get("shares")),
        )

    def to_map(self) -> dict[str, str]:
        fields = {
            "id": self.id,
            "uid": self.uid,
            "type": self.type,
            "content": self.content,
            "url": self.url,
            "md5": self.md5,
            "created": self.created,
        }
        return {k: v for k, v in fields.items() if v is not None}
