"""
Credential bookkeeping: revoked tokens, failed-login counters and
account activation tokens.

All of them live under TTL'd plain keys so they clean themselves up:
  tokens:blacklist:{token}         revoked until the token would have expired
  login:failures:{username}        failure count inside the lockout window
  user:activations:{token}:uid     uid waiting for account activation
"""
import logging
from typing import Optional

from socialgraph.storage.port import StoragePort

logger = logging.getLogger(__name__)

BLACKLIST_PREFIX = "tokens:blacklist:"
FAILURES_PREFIX = "login:failures:"
ACTIVATION_PREFIX = "user:activations:"


def activation_key(token: str) -> str:
    return f"{ACTIVATION_PREFIX}{token}:uid"


class TokenStore:

    def __init__(self, store: StoragePort):
        self.store = store

    async def blacklist(self, token: str, expiration_seconds: int) -> None:
        await self.store.set(BLACKLIST_PREFIX + token, "1", ex=max(expiration_seconds, 1))
        logger.debug("Blacklisted token, expires in %d seconds", expiration_seconds)

    async def is_blacklisted(self, token: str) -> bool:
        return await self.store.exists(BLACKLIST_PREFIX + token)

    async def failed_logins(self, username: str) -> int:
        value = await self.store.get(FAILURES_PREFIX + username)
        return int(value) if value else 0

    async def record_failed_login(self, username: str, window_seconds: int) -> int:
        key = FAILURES_PREFIX + username
        count = await self.store.incr(key)
        if count == 1:
            await self.store.expire(key, window_seconds)
        return count

    async def clear_failed_logins(self, username: str) -> None:
        await self.store.delete(FAILURES_PREFIX + username)

    async def save_activation_token(self, token: str, uid: str, expiration_seconds: int) -> None:
        await self.store.set(activation_key(token), uid, ex=max(expiration_seconds, 1))

    async def uid_for_activation_token(self, token: str) -> Optional[str]:
        return await self.store.get(activation_key(token))

    async def delete_activation_token(self, token: str) -> bool:
        return await self.store.delete(activation_key(token)) > 0
