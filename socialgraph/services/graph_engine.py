"""
Follow-graph mutations and member listing.

A follow edge lives twice: actor ∈ target.followers and target ∈
actor.following. Follow/unfollow is four single-key writes (two set
updates, two counter bumps) with no cross-key atomicity, so the counters
on the profile hash are advisory. The sets are authoritative;
`reconcile_counters` rebuilds the counters from them.

The friends set is maintained here too: whenever an edge makes the pair
mutual both users land in each other's friends set, and any unfollow
removes the pair from both.
"""
import logging
import time
from typing import Optional

from socialgraph.errors import (
    AlreadyFollowingError,
    IncompleteRequest,
    KeyNotFound,
    NotFollowingError,
    SelfFollowError,
    SelfUnfollowError,
    UserNotFound,
)
from socialgraph.models import Relation
from socialgraph.schemas import Member, MembersResponse
from socialgraph.storage.graph_store import GraphStore

logger = logging.getLogger(__name__)


class GraphEngine:

    def __init__(self, graph: GraphStore):
        self.graph = graph

    async def resolve_target(
        self, uid: Optional[str] = None, username: Optional[str] = None
    ) -> str:
        """Turn a uid or a username into a verified uid."""
        if uid:
            if not await self.graph.exists(uid):
                raise UserNotFound(uid)
            return uid
        if username:
            resolved = await self.graph.find_uid_by_username(username)
            if resolved is None:
                raise UserNotFound(username)
            return resolved
        raise IncompleteRequest("Either uid or username is required")

    async def follow(
        self,
        actor_uid: str,
        target_uid: Optional[str] = None,
        target_username: Optional[str] = None,
    ) -> str:
        """Create actor → target. Returns the resolved target uid."""
        target = await self.resolve_target(target_uid, target_username)

        if actor_uid == target:
            raise SelfFollowError()

        if await self.graph.is_member(target, Relation.FOLLOWERS, actor_uid):
            raise AlreadyFollowingError(actor_uid, target)

        await self.graph.add_member(target, Relation.FOLLOWERS, actor_uid)
        await self.graph.add_member(actor_uid, Relation.FOLLOWING, target)

        await self.graph.increment_field(target, Relation.FOLLOWERS.value, 1)
        await self.graph.increment_field(actor_uid, Relation.FOLLOWING.value, 1)

        if await self.graph.is_member(actor_uid, Relation.FOLLOWERS, target):
            await self.graph.add_member(actor_uid, Relation.FRIENDS, target)
            await self.graph.add_member(target, Relation.FRIENDS, actor_uid)

        logger.info("User %s followed %s", actor_uid, target)
        return target

    async def unfollow(
        self,
        actor_uid: str,
        target_uid: Optional[str] = None,
        target_username: Optional[str] = None,
    ) -> str:
        """Remove actor → target. Returns the resolved target uid."""
        target = await self.resolve_target(target_uid, target_username)

        if actor_uid == target:
            raise SelfUnfollowError()

        if not await self.graph.is_member(target, Relation.FOLLOWERS, actor_uid):
            raise NotFollowingError(actor_uid, target)

        await self.graph.remove_member(target, Relation.FOLLOWERS, actor_uid)
        await self.graph.remove_member(actor_uid, Relation.FOLLOWING, target)

        followers = await self.graph.increment_field(target, Relation.FOLLOWERS.value, -1)
        following = await self.graph.increment_field(actor_uid, Relation.FOLLOWING.value, -1)
        if followers < 0 or following < 0:
            logger.error(
                "Negative follow counter after %s unfollowed %s "
                "(followers=%d, following=%d) — sets and counters disagree",
                actor_uid, target, followers, following,
            )

        await self.graph.remove_member(actor_uid, Relation.FRIENDS, target)
        await self.graph.remove_member(target, Relation.FRIENDS, actor_uid)

        logger.info("User %s unfollowed %s", actor_uid, target)
        return target

    async def list_members(self, uid: str, relation: Relation) -> MembersResponse:
        """
        Resolve every uid in the relation set to (uid, username, fullname).
        Members that no longer resolve are skipped. Order is whatever the
        set yields.
        """
        start = time.perf_counter()

        member_uids = await self.graph.members(uid, relation)
        members: list[Member] = []
        for member_uid in member_uids:
            username = await self.graph.find_username_by_uid(member_uid)
            if username is None:
                logger.debug("Skipping dangling %s member %s of %s", relation.value, member_uid, uid)
                continue
            fullname = await self.graph.get_field(member_uid, "fullname")
            members.append(Member(uid=member_uid, username=username, fullname=fullname))

        duration = (time.perf_counter() - start) * 1000
        return MembersResponse(members=members, count=len(members), duration=round(duration, 2))

    async def reconcile_counters(self, uid: str) -> tuple[int, int]:
        """Overwrite the advisory counters with the real set cardinalities."""
        followers = await self.graph.member_count(uid, Relation.FOLLOWERS)
        following = await self.graph.member_count(uid, Relation.FOLLOWING)
        await self.graph.update_field(uid, Relation.FOLLOWERS.value, str(followers))
        await self.graph.update_field(uid, Relation.FOLLOWING.value, str(following))
        logger.info("Reconciled counters for %s: followers=%d following=%d", uid, followers, following)
        return followers, following

    # ── Per-user filters and device data ──────────────────────────────────

    async def add_negative_keyword(self, uid: str, keyword: str) -> bool:
        """Hide future posts containing `keyword` from this user. Exact, case-sensitive."""
        added = await self.graph.add_negative_keyword(uid, keyword)
        if added:
            logger.info("User %s added negative keyword %r", uid, keyword)
        return added

    async def block_image(self, uid: str, md5: str) -> bool:
        return await self.graph.block_image(uid, md5)

    async def registered_devices(self, uid: str) -> list[str]:
        return sorted(await self.graph.get_devices(uid))

    async def public_rsa_key(self, uid: str) -> str:
        key = await self.graph.get_public_rsa_key(uid)
        if not key:
            raise KeyNotFound()
        return key
