from socialgraph.models import Post, PostType, Relation, User


class TestPost:

    def test_map_round_trip(self):
        post = Post(
            id="p1",
            uid="u1",
            type="photo",
            content="sunset",
            url="http://cdn/p1.jpg",
            md5="abc123",
            created="1700000000",
        )
        assert Post.from_map(post.to_map()) == post

    def test_absent_fields_omitted(self):
        data = Post(id="p1", uid="u1").to_map()
        assert data == {"id": "p1", "uid": "u1", "type": "text"}

    def test_malformed_counters_parse_as_zero(self):
        post = Post.from_map({"id": "p1", "uid": "u1", "likes": "lots", "shares": "3"})
        assert post.likes == 0
        assert post.loves == 0
        assert post.shares == 3

    def test_missing_type_defaults_to_text(self):
        assert Post.from_map({"id": "p1"}).type == "text"


class TestPostType:

    def test_parse(self):
        assert PostType.parse("VIDEO") is PostType.VIDEO
        assert PostType.parse("gif") is PostType.TEXT
        assert PostType.parse(None) is PostType.TEXT


class TestUser:

    def test_map_round_trip(self):
        user = User(
            uid="u1",
            username="alice",
            email="alice@example.com",
            fullname="Alice",
            password_hash="$argon2id$...",
            poly="poly-1",
            followers=3,
            following=4,
            poly_count=2,
            activated=True,
        )
        data = user.to_map()
        assert data["passwordHash"] == "$argon2id$..."
        assert data["polyCount"] == "2"
        assert "banned" not in data
        assert User.from_map(data) == user

    def test_banned_flag(self):
        assert User.from_map({"uid": "u1", "username": "x", "banned": "true"}).banned is True


def test_relation_values():
    assert [r.value for r in Relation] == [
        "followers", "following", "friends", "blocked", "blockers", "muted", "muters",
    ]
