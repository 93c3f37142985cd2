"""
Like / love / fav / share toggles.

Each action on a post is recorded twice:
  post:{id}{suffix}        LIST  actor uids, most recent first
  post:{id}:flags:{actor}  HASH  noun → "1"

The flag is claimed with HSETNX, and only the call that wins the claim
touches the list, so two concurrent likes by the same actor can't both
land in the list. Reversal strips every occurrence of the actor from the
list, which also repairs duplicates left behind by older data.
"""
import logging
import time

from socialgraph.errors import PostNotFound
from socialgraph.models import Action
from socialgraph.schemas import ActionActor, ActionListResponse
from socialgraph.storage.graph_store import GraphStore
from socialgraph.storage.post_store import PostStore
from socialgraph.telemetry import SOCIAL_ACTIONS_TOTAL

logger = logging.getLogger(__name__)


class SocialActionEngine:

    def __init__(self, posts: PostStore, graph: GraphStore):
        self.posts = posts
        self.graph = graph

    async def _require_post(self, post_id: str) -> None:
        if not await self.posts.exists(post_id):
            raise PostNotFound(post_id)

    async def perform(self, action: Action, post_id: str, actor_uid: str) -> dict[str, str]:
        await self._require_post(post_id)

        if not await self.posts.set_action_flag(post_id, actor_uid, action):
            SOCIAL_ACTIONS_TOTAL.labels(kind=action.noun, result="already").inc()
            return {action.already_key: post_id}

        await self.posts.add_action(post_id, action, actor_uid)
        SOCIAL_ACTIONS_TOTAL.labels(kind=action.noun, result="performed").inc()
        logger.debug("User %s %s post %s", actor_uid, action.past_tense, post_id)
        return {action.performed_key: post_id}

    async def reverse(self, action: Action, post_id: str, actor_uid: str) -> dict[str, str]:
        await self._require_post(post_id)

        removed = await self.posts.remove_action(post_id, action, actor_uid)
        cleared = await self.posts.clear_action_flag(post_id, actor_uid, action)

        if removed or cleared:
            SOCIAL_ACTIONS_TOTAL.labels(kind=action.noun, result="reversed").inc()
            logger.debug("User %s un%s post %s", actor_uid, action.past_tense, post_id)
            return {action.reversed_key: post_id}

        SOCIAL_ACTIONS_TOTAL.labels(kind=action.noun, result="noop").inc()
        return {action.cannot_reverse_key: f"not {action.past_tense}"}

    async def list_actions(
        self, action: Action, post_id: str, offset: int = 0, limit: int = 20
    ) -> ActionListResponse:
        """A page of the actors who performed `action`, newest first."""
        start = time.perf_counter()
        await self._require_post(post_id)

        actors: list[ActionActor] = []
        for uid in await self.posts.action_actors(post_id, action, offset, limit):
            actors.append(
                ActionActor(
                    uuid=uid,
                    username=await self.graph.find_username_by_uid(uid),
                    display_name=await self.graph.get_field(uid, "fullname"),
                )
            )

        duration = (time.perf_counter() - start) * 1000
        return ActionListResponse(
            object=post_id,
            actors=actors,
            count=len(actors),
            duration=round(duration, 2),
        )

    async def has_action(self, action: Action, post_id: str, actor_uid: str) -> bool:
        return await self.posts.has_action(post_id, actor_uid, action)
