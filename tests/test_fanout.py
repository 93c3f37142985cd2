"""
Tests for status creation, tokenization and follower fan-out.
"""
import pytest

from socialgraph.models import Importance, Relation
from socialgraph.services.fanout import FanoutEngine, tokenize


class TestTokenize:

    def test_words_in_first_seen_order(self):
        assert tokenize("Hello world, hello World!") == ["Hello", "world", "hello", "World"]

    def test_duplicates_dropped(self):
        assert tokenize("spam spam eggs spam") == ["spam", "eggs"]

    def test_punctuation_and_symbols_dropped(self):
        assert tokenize("#tag -- @user ... !!") == ["tag", "user"]

    def test_contractions_and_decimals_stay_whole(self):
        assert tokenize("don't panic, pi is 3.14") == ["don't", "panic", "pi", "is", "3.14"]

    def test_unicode_letters(self):
        assert tokenize("café naïve 東京") == ["café", "naïve", "東京"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize(None) == []


@pytest.fixture
async def network(graph_engine, make_user):
    """alice is followed by bob and carol."""
    await make_user("u-alice", "alice")
    await make_user("u-bob", "bob")
    await make_user("u-carol", "carol")
    await graph_engine.follow("u-bob", target_uid="u-alice")
    await graph_engine.follow("u-carol", target_uid="u-alice")


class TestCreateStatus:

    async def test_post_persisted(self, fanout, posts, network):
        post = await fanout.create_status("u-alice", "hello world")

        stored = await posts.find_by_id(post.id)
        assert stored.uid == "u-alice"
        assert stored.content == "hello world"
        assert stored.type == "text"
        assert stored.created.isdigit()

    async def test_delivered_to_all_follower_structures(self, fanout, posts, network):
        post = await fanout.create_status("u-alice", "hello world")

        for follower in ("u-bob", "u-carol"):
            assert await posts.timeline_page(follower, 0, 10) == [post.id]
            assert await posts.importance_page(follower, Importance.PERSONAL, 0, 10) == [post.id]
            assert await posts.importance_page(follower, Importance.EVERYONE, 0, 10) == [post.id]

    async def test_author_sees_own_post(self, fanout, posts, network):
        post = await fanout.create_status("u-alice", "hello world")
        assert await posts.timeline_page("u-alice", 0, 10) == [post.id]

    async def test_negative_keyword_skips_follower(self, fanout, posts, graph, network):
        await graph.add_negative_keyword("u-bob", "spoiler")

        post = await fanout.create_status("u-alice", "big spoiler ahead")

        assert await posts.timeline_page("u-bob", 0, 10) == []
        assert await posts.importance_page("u-bob", Importance.PERSONAL, 0, 10) == []
        assert await posts.timeline_page("u-carol", 0, 10) == [post.id]

    async def test_keyword_match_is_case_sensitive(self, fanout, posts, graph, network):
        await graph.add_negative_keyword("u-bob", "spoiler")

        post = await fanout.create_status("u-alice", "SPOILER ahead")

        assert await posts.timeline_page("u-bob", 0, 10) == [post.id]

    async def test_unknown_type_falls_back_to_text(self, fanout, network):
        post = await fanout.create_status("u-alice", "hi", post_type="hologram")
        assert post.type == "text"

    async def test_photo_increments_tally(self, fanout, store, network):
        await fanout.create_status("u-alice", "look", post_type="photo", url="http://x/1.jpg")
        await fanout.create_status("u-alice", "again", post_type="photo", url="http://x/2.jpg")
        assert await store.hget("photos", "u-alice") == "2"
        assert await store.hget("videos", "u-alice") is None

    async def test_no_followers(self, fanout, posts, make_user):
        await make_user("u-loner", "loner")
        post = await fanout.create_status("u-loner", "anyone?")
        assert await posts.timeline_page("u-loner", 0, 10) == [post.id]

    async def test_timeline_trimmed_to_max_size(self, posts, graph, network):
        engine = FanoutEngine(posts, graph, max_timeline_size=2)

        ids = [(await engine.create_status("u-alice", f"post {i}")).id for i in range(3)]

        assert await posts.timeline_page("u-bob", 0, 10) == [ids[2], ids[1]]
        for kind in Importance:
            assert set(await posts.importance_page("u-bob", kind, 0, 10)) == {ids[2], ids[1]}

    async def test_newest_post_survives_importance_cap(self, posts, graph, network):
        engine = FanoutEngine(posts, graph, max_timeline_size=3)

        for i in range(30):
            post = await engine.create_status("u-alice", f"post {i}")
            for kind in Importance:
                ranked = await posts.importance_page("u-bob", kind, 0, 10)
                assert post.id in ranked, (i, kind)
                assert len(ranked) <= 3

        window = await posts.timeline_page("u-bob", 0, 10)
        assert len(window) == 3
        for kind in Importance:
            assert set(await posts.importance_page("u-bob", kind, 0, 10)) == set(window)


class TestReshare:

    async def test_reshare_reaches_resharers_followers(self, fanout, posts, graph_engine, make_user, network):
        await make_user("u-dave", "dave")
        await graph_engine.follow("u-dave", target_uid="u-bob")
        post = await fanout.create_status("u-alice", "worth sharing")

        result = await fanout.reshare_status("u-bob", post.id)

        assert result.id == post.id
        assert await posts.timeline_page("u-dave", 0, 10) == [post.id]

    async def test_reshare_respects_keywords(self, fanout, posts, graph, graph_engine, make_user, network):
        await make_user("u-dave", "dave")
        await graph_engine.follow("u-dave", target_uid="u-bob")
        await graph.add_negative_keyword("u-dave", "sharing")
        post = await fanout.create_status("u-alice", "worth sharing")

        await fanout.reshare_status("u-bob", post.id)

        assert await posts.timeline_page("u-dave", 0, 10) == []

    async def test_reshare_missing_post_is_noop(self, fanout, posts, network):
        assert await fanout.reshare_status("u-bob", "nope") is None
        assert await posts.timeline_page("u-bob", 0, 10) == []

    async def test_reshare_creates_no_post(self, fanout, store, network):
        post = await fanout.create_status("u-alice", "original")
        await fanout.reshare_status("u-bob", post.id)
        post_keys = [k for k in store._data if k.startswith("post:") and k.count(":") == 1]
        assert post_keys == [f"post:{post.id}"]
