"""
End-to-end tests through the FastAPI app with the in-memory backend.
"""
import pytest
from fastapi.testclient import TestClient

from socialgraph.main import app
from socialgraph.services.accounts import AccountService
from socialgraph.storage.graph_store import GraphStore
from socialgraph.storage.token_store import TokenStore


@pytest.fixture
def client():
    # a fresh store per test: the lifespan opens a new MemoryStore
    with TestClient(app) as c:
        yield c


def register(client: TestClient, username: str, fullname: str | None = None) -> dict:
    resp = client.post(
        "/api/auth/register",
        json={
            "username": username,
            "password": "s3cret-pass",
            "email": f"{username}@example.com",
            "fullName": fullname or username.title(),
        },
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


class TestHealth:

    def test_ping(self, client):
        resp = client.get("/api/ping")
        assert resp.status_code == 200
        assert resp.text == "hello"

    def test_status(self, client):
        body = client.get("/api/status").json()
        assert body["status"] == "UP"
        assert body["version"] == "2.0.0"
        assert "timestamp" in body

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_metrics_exposed(self, client):
        resp = client.get("/metrics/")
        assert resp.status_code == 200
        assert "social_actions_total" in resp.text


class TestAuth:

    def test_register_and_login(self, client):
        reg = register(client, "alice")
        assert reg["token_type"] == "Bearer"

        resp = client.post("/api/auth/login", json={"username": "alice", "password": "s3cret-pass"})
        assert resp.status_code == 200
        assert resp.json()["uid"] == reg["uid"]

    def test_duplicate_registration(self, client):
        register(client, "alice")
        resp = client.post(
            "/api/auth/register",
            json={"username": "alice", "password": "another-pass", "email": "a2@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "cannot_register"

    def test_bad_credentials_error_shape(self, client):
        register(client, "alice")
        resp = client.post("/api/auth/login", json={"username": "alice", "password": "wrong-pass"})

        assert resp.status_code == 401
        body = resp.json()
        assert body["error"] == "invalid_grant"
        assert body["error_description"]
        assert body["path"] == "/api/auth/login"
        assert "timestamp" in body

    def test_validation_error_lists_fields(self, client):
        resp = client.post(
            "/api/auth/register",
            json={"username": "a!", "password": "short", "email": "not-an-email"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "validation_error"
        fields = {e["field"] for e in body["errors"]}
        assert {"username", "password", "email"} <= fields

    def test_missing_token(self, client):
        resp = client.get("/api/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "unauthorized"

    def test_logout_revokes_token(self, client):
        alice = register(client, "alice")
        assert client.post("/api/auth/logout", headers=auth(alice)).status_code == 200

        resp = client.get("/api/me", headers=auth(alice))
        assert resp.status_code == 401
        assert resp.json()["error"] == "invalid_token"

    def test_activate_account(self, client):
        alice = register(client, "alice")
        store = client.app.state.store
        accounts = AccountService(GraphStore(store), TokenStore(store))
        token = client.portal.call(accounts.issue_activation_token, alice["uid"])

        resp = client.get("/api/auth/activate", params={"token": token})
        assert resp.status_code == 200
        assert resp.json() == {"activated": True}

        again = client.get("/api/auth/activate", params={"token": token})
        assert again.status_code == 400
        assert again.json() == {"activated": False}

    def test_activate_unknown_token(self, client):
        resp = client.get("/api/auth/activate", params={"token": "bogus"})
        assert resp.status_code == 400
        assert resp.json() == {"activated": False}


class TestGraph:

    def test_follow_friends_flow(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")

        resp = client.post("/api/follow", json={"uid": bob["uid"]}, headers=auth(alice))
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "following.uid": bob["uid"], "following.username": ""}

        followers = client.get("/api/followers", headers=auth(bob)).json()
        assert followers["count"] == 1
        assert followers["members"][0]["uid"] == alice["uid"]
        assert followers["members"][0]["username"] == "alice"

        client.post("/api/follow", json={"username": "alice"}, headers=auth(bob))

        for user, other in ((alice, bob), (bob, alice)):
            friends = client.get("/api/friends", headers=auth(user)).json()
            assert [m["uid"] for m in friends["members"]] == [other["uid"]]

        me = client.get("/api/me", headers=auth(bob)).json()
        assert me["followers"] == 1 and me["following"] == 1

    def test_follow_twice_conflicts(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        client.post("/api/follow", json={"uid": bob["uid"]}, headers=auth(alice))

        resp = client.post("/api/follow", json={"uid": bob["uid"]}, headers=auth(alice))
        assert resp.status_code == 409
        assert resp.json()["error"] == "cannot_follow"

    def test_follow_unknown_user(self, client):
        alice = register(client, "alice")
        resp = client.post("/api/follow", json={"username": "ghost"}, headers=auth(alice))
        assert resp.status_code == 404
        assert resp.json()["error"] == "user_not_found"

    def test_follow_requires_target(self, client):
        alice = register(client, "alice")
        resp = client.post("/api/follow", json={}, headers=auth(alice))
        assert resp.status_code == 400

    def test_unfollow(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        client.post("/api/follow", json={"uid": bob["uid"]}, headers=auth(alice))

        resp = client.post("/api/unfollow", json={"uid": bob["uid"]}, headers=auth(alice))
        assert resp.json() == {"success": True, "unfollowed": bob["uid"]}
        assert client.get("/api/followers", headers=auth(bob)).json()["count"] == 0

    def test_every_relation_is_listable(self, client):
        alice = register(client, "alice")
        for relation in ("followers", "following", "friends", "blocked", "blockers", "muted", "muters"):
            resp = client.get(f"/api/{relation}", headers=auth(alice))
            assert resp.status_code == 200, relation
            assert resp.json()["count"] == 0

    def test_negative_keyword(self, client):
        alice = register(client, "alice")
        resp = client.post("/api/add/keyword/negative", params={"keyword": "spoiler"}, headers=auth(alice))
        assert resp.json() == {"keyword": "spoiler", "added": True}

    def test_missing_public_key(self, client):
        alice = register(client, "alice")
        resp = client.get("/api/me/rsa/public/key", headers=auth(alice))
        assert resp.status_code == 404
        assert resp.json()["error"] == "key_not_found"


class TestPostsAndTimeline:

    @pytest.fixture
    def pair(self, client):
        alice = register(client, "alice", "Alice A")
        bob = register(client, "bob")
        client.post("/api/follow", json={"uid": alice["uid"]}, headers=auth(bob))
        return alice, bob

    def test_status_reaches_follower_timeline(self, client, pair):
        alice, bob = pair
        resp = client.post("/api/status", json={"content": "hello world"}, headers=auth(alice))
        assert resp.status_code == 200
        post = resp.json()
        assert post["uid"] == alice["uid"]
        assert post["type"] == "text"
        assert post["url"] == ""

        timeline = client.get("/api/timeline", headers=auth(bob)).json()
        assert timeline["count"] == 1
        entity = timeline["entities"][0]
        assert entity["activity"]["uuid"] == post["id"]
        assert entity["actor"]["username"] == "alice"
        assert entity["actor"]["fullname"] == "Alice A"

        for kind in ("personal", "everyone"):
            ranked = client.get(f"/api/timeline/{kind}", headers=auth(bob)).json()
            assert [e["activity"]["uuid"] for e in ranked["entities"]] == [post["id"]]

    def test_timeline_pagination_params(self, client, pair):
        alice, bob = pair
        for i in range(3):
            client.post("/api/status", json={"content": f"post {i}"}, headers=auth(alice))

        page = client.get("/api/timeline", params={"index": 2, "count": 2}, headers=auth(bob)).json()
        assert page["count"] == 1
        assert page["entities"][0]["activity"]["content"] == "post 0"

    def test_unknown_type_stored_as_text(self, client, pair):
        alice, _ = pair
        resp = client.post("/api/status", json={"content": "hi", "type": "gif"}, headers=auth(alice))
        assert resp.status_code == 200
        assert resp.json()["type"] == "text"

    def test_empty_content_rejected(self, client, pair):
        alice, _ = pair
        resp = client.post("/api/status", json={"content": ""}, headers=auth(alice))
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "content"

    def test_like_toggle(self, client, pair):
        alice, bob = pair
        post_id = client.post("/api/status", json={"content": "like me"}, headers=auth(alice)).json()["id"]

        assert client.post("/api/like", json={"uuid": post_id}, headers=auth(bob)).json() == {"likedPost": post_id}
        assert client.post("/api/like", json={"uuid": post_id}, headers=auth(bob)).json() == {
            "alreadyLikedPost": post_id
        }

        likes = client.get("/api/likes", params={"uuid": post_id}, headers=auth(alice)).json()
        assert likes["count"] == 1
        assert likes["actors"][0] == {
            "type": "person",
            "uuid": bob["uid"],
            "username": "bob",
            "display_name": "Bob",
        }

        activity = client.get("/api/timeline", headers=auth(bob)).json()["entities"][0]["activity"]
        assert activity["is_liked"] is True

        assert client.post("/api/unlike", json={"uuid": post_id}, headers=auth(bob)).json() == {
            "unlikedPost": post_id
        }
        assert client.post("/api/unlike", json={"uuid": post_id}, headers=auth(bob)).json() == {
            "cannotUnlike": "not liked"
        }

    def test_fav_routes_use_faves_listing(self, client, pair):
        alice, bob = pair
        post_id = client.post("/api/status", json={"content": "fav me"}, headers=auth(alice)).json()["id"]

        assert client.post("/api/fav", json={"uuid": post_id}, headers=auth(bob)).json() == {"favedPost": post_id}
        assert client.get("/api/faves", params={"uuid": post_id}, headers=auth(bob)).json()["count"] == 1

    def test_action_on_missing_post(self, client, pair):
        _, bob = pair
        resp = client.post("/api/love", json={"uuid": "nope"}, headers=auth(bob))
        assert resp.status_code == 404
        assert resp.json()["error"] == "post_not_found"

    def test_reshare(self, client, pair):
        alice, bob = pair
        carol = register(client, "carol")
        client.post("/api/follow", json={"uid": bob["uid"]}, headers=auth(carol))
        post_id = client.post("/api/status", json={"content": "pass it on"}, headers=auth(alice)).json()["id"]

        resp = client.post("/api/reshare", json={"uuid": post_id}, headers=auth(bob))
        assert resp.json()["success"] is True

        timeline = client.get("/api/timeline", headers=auth(carol)).json()
        assert [e["activity"]["uuid"] for e in timeline["entities"]] == [post_id]


class TestMedia:

    def test_storage_key_without_minio(self, client):
        alice = register(client, "alice")
        resp = client.post("/api/request/storage/key", headers=auth(alice))
        assert resp.status_code == 200
        assert "error" in resp.json()

    def test_upload_without_minio(self, client):
        alice = register(client, "alice")
        resp = client.post("/api/upload", content=b"\xff\xd8\xff", headers=auth(alice))
        assert resp.status_code == 500
        assert resp.json() == {"error": "Upload failed"}
