"""
Registration, login and token lifecycle.

Usernames are reserved with HSETNX on users:by_name before the profile is
written, so two concurrent registrations of the same name can't both win;
the reservation is released again if the profile write fails. New accounts
start deactivated and get a TTL'd activation token.
Failed logins are counted per username in a TTL'd key; reaching
`login_max_failures` inside the window locks the name out until the key
expires.
"""
import logging
from typing import Any, Optional

from socialgraph.config import settings
from socialgraph.errors import (
    AccountBanned,
    InvalidCredentials,
    InvalidToken,
    TemporaryLockout,
    UserNotFound,
    UsernameTaken,
)
from socialgraph.models import User, new_id
from socialgraph.schemas import AuthResponse, UserResponse
from socialgraph.security import (
    create_token,
    decode_token,
    hash_password,
    seconds_until_expiry,
    verify_password,
)
from socialgraph.storage.graph_store import GraphStore
from socialgraph.storage.token_store import TokenStore

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, graph: GraphStore, tokens: TokenStore):
        self.graph = graph
        self.tokens = tokens

    async def register(
        self,
        username: str,
        password: str,
        email: str,
        fullname: Optional[str] = None,
    ) -> AuthResponse:
        uid = new_id()
        if not await self.graph.claim_username(username, uid):
            raise UsernameTaken(username)

        user = User(
            uid=uid,
            username=username,
            email=email,
            fullname=fullname,
            password_hash=hash_password(password),
            poly=new_id(),
            followers=0,
            following=0,
            poly_count=1,
            activated=False,
        )
        try:
            await self.graph.save(user)
        except Exception:
            # give the name back so a retry can register it
            await self.graph.release_username(username)
            raise
        await self.issue_activation_token(uid)
        logger.info("Registered user %s (%s)", username, uid)

        return AuthResponse(
            username=username,
            uid=uid,
            token=create_token(username, uid, email),
            expires_in=settings.jwt_expiration_seconds,
        )

    async def issue_activation_token(self, uid: str) -> str:
        token = new_id()
        await self.tokens.save_activation_token(token, uid, settings.activation_token_expiry_seconds)
        logger.debug("Issued activation token for user %s", uid)
        return token

    async def activate(self, token: str) -> bool:
        uid = await self.tokens.uid_for_activation_token(token)
        user = await self.graph.find_by_uid(uid) if uid else None
        if user is None:
            return False
        await self.graph.update_field(user.uid, "activated", "true")
        await self.tokens.delete_activation_token(token)
        logger.info("Activated account %s", user.username)
        return True

    async def login(self, username: str, password: str) -> AuthResponse:
        if await self.tokens.failed_logins(username) >= settings.login_max_failures:
            logger.warning("Login for %s rejected: temporary lockout", username)
            raise TemporaryLockout()

        user = await self.graph.find_by_username(username)
        if user is None or not user.password_hash or not verify_password(password, user.password_hash):
            failures = await self.tokens.record_failed_login(username, settings.login_lockout_seconds)
            logger.info("Failed login for %s (%d in window)", username, failures)
            raise InvalidCredentials()

        if user.banned:
            raise AccountBanned()

        await self.tokens.clear_failed_logins(username)
        await self.graph.increment_field(user.uid, "polyCount", 1)
        logger.info("User %s logged in", username)

        return AuthResponse(
            username=user.username,
            uid=user.uid,
            token=create_token(user.username, user.uid, user.email),
            expires_in=settings.jwt_expiration_seconds,
            followers=user.followers,
            following=user.following,
        )

    async def logout(self, token: str) -> None:
        claims = await self.verify_token(token)
        await self.tokens.blacklist(token, seconds_until_expiry(claims))
        logger.info("User %s logged out", claims.get("sub"))

    async def verify_token(self, token: str) -> dict[str, Any]:
        claims = decode_token(token)
        if await self.tokens.is_blacklisted(token):
            raise InvalidToken("Token revoked")
        if not claims.get("uid"):
            raise InvalidToken()
        return claims

    async def profile(self, uid: str) -> UserResponse:
        user = await self.graph.find_by_uid(uid)
        if user is None:
            raise UserNotFound(uid)
        return UserResponse(
            uid=user.uid,
            username=user.username,
            fullname=user.fullname,
            email=user.email,
            followers=user.followers,
            following=user.following,
            profile_picture=user.profile_picture,
        )
