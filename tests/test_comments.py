import pytest
from sqlalchemy.exc import OperationalError

from app.models.comment import Comment
from app.schemas.comment import resolve_author_name
from app.services.comment_service import CommentService
from app.services.exceptions import InternalError, InvalidRequest


@pytest.fixture
def service(db_session):
    return CommentService(db_session)


# ============================================
# Author name resolution
# ============================================

@pytest.mark.parametrize("override, username, name, expected", [
    ("Zaphod", "alice", "Alice Liddell", "Zaphod"),
    (None, "alice", "Alice Liddell", "alice"),
    ("", "alice", "Alice Liddell", "alice"),
    (None, None, "Alice Liddell", "Alice Liddell"),
    (None, "   ", "Alice Liddell", "Alice Liddell"),
    (None, None, None, "Anonymous"),
])
def test_resolve_author_name(override, username, name, expected):
    assert resolve_author_name(override, username, name) == expected


# ============================================
# Service
# ============================================

class TestCommentService:

    def test_add_comment_defaults_to_username(self, service, test_user):
        comment = service.add_comment(test_user, "7", "Great!")

        assert comment.author_name == "alice"
        assert comment.title_id == "7"
        assert comment.user_id == test_user.id
        assert comment.created_at is not None

    def test_add_comment_with_override(self, service, test_user):
        comment = service.add_comment(test_user, "7", "Great!", author_name="Arthur")
        assert comment.author_name == "Arthur"

    def test_add_comment_without_handle_is_anonymous(self, service, make_user):
        ghost = make_user(email="ghost@example.com", username=None, name=None)
        comment = service.add_comment(ghost, "7", "Boo")
        assert comment.author_name == "Anonymous"

    @pytest.mark.parametrize("title_id, text", [(None, "Hi"), ("7", None), ("7", "   "), ("", "Hi")])
    def test_add_comment_requires_title_and_text(self, service, db_session, test_user, title_id, text):
        with pytest.raises(InvalidRequest):
            service.add_comment(test_user, title_id, text)
        assert db_session.query(Comment).count() == 0

    def test_list_comments_newest_first(self, service, test_user, make_user):
        bob = make_user(email="bob@example.com", username="bob")
        first = service.add_comment(test_user, "7", "First")
        second = service.add_comment(bob, "7", "Second")
        service.add_comment(bob, "8", "Other title")

        comments = service.list_comments("7")

        assert [c.id for c in comments] == [second.id, first.id]
        assert comments[0].user.username == "bob"

    def test_list_comments_requires_title(self, service):
        with pytest.raises(InvalidRequest) as exc_info:
            service.list_comments(None)
        assert exc_info.value.message == "Title ID is required"

    def test_store_failure_raises_internal_error(self, service, db_session, test_user, monkeypatch):
        def broken_commit():
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(db_session, "commit", broken_commit)

        with pytest.raises(InternalError) as exc_info:
            service.add_comment(test_user, "7", "Great!")
        assert exc_info.value.message == "Failed to create comment"


# ============================================
# HTTP
# ============================================

class TestCommentsApi:

    def test_post_comment_uses_username(self, client, auth_headers, test_user):
        response = client.post("/comments", json={"titleId": "7", "text": "Great!"}, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["authorName"] == "alice"
        assert data["titleId"] == "7"
        assert data["text"] == "Great!"
        assert data["userId"] == test_user.id

    def test_post_comment_with_author_override(self, client, auth_headers):
        response = client.post(
            "/comments",
            json={"titleId": 7, "text": "Great!", "authorName": "Ford"},
            headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["authorName"] == "Ford"
        assert response.json()["titleId"] == "7"

    def test_email_only_user_posts_as_anonymous(self, client, make_user, headers_for):
        dave = make_user(email="dave@example.com", username=None, name=None)

        response = client.post("/comments", json={"titleId": "7", "text": "Hi"}, headers=headers_for(dave))

        assert response.status_code == 201
        assert response.json()["authorName"] == "Anonymous"
        listed = client.get("/comments", params={"titleId": "7"}).json()
        assert listed[0]["authorName"] == "Anonymous"
        assert "dave@example.com" not in response.text

    def test_post_comment_requires_session(self, client, db_session):
        response = client.post("/comments", json={"titleId": "7", "text": "Great!"})

        assert response.status_code == 401
        assert db_session.query(Comment).count() == 0

    def test_post_comment_requires_text(self, client, auth_headers):
        response = client.post("/comments", json={"titleId": "7"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_script_in_comment_is_rejected(self, client, auth_headers):
        response = client.post(
            "/comments",
            json={"titleId": "7", "text": "<script>alert(1)</script>"},
            headers=auth_headers
        )
        assert response.status_code == 400

    def test_html_is_sanitized(self, client, auth_headers):
        response = client.post(
            "/comments",
            json={"titleId": "7", "text": "<b>Loved</b> it <img src=x>"},
            headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["text"] == "<b>Loved</b> it"

    def test_get_comments_is_public_and_ordered(self, client, auth_headers):
        client.post("/comments", json={"titleId": "7", "text": "First"}, headers=auth_headers)
        client.post("/comments", json={"titleId": "7", "text": "Second"}, headers=auth_headers)

        response = client.get("/comments", params={"titleId": "7"})

        assert response.status_code == 200
        assert [c["text"] for c in response.json()] == ["Second", "First"]
        assert response.json()[0]["user"]["username"] == "alice"

    def test_get_comments_requires_title_id(self, client):
        response = client.get("/comments")

        assert response.status_code == 400
        assert response.json() == {"error": "Title ID is required"}

    def test_stored_comment_without_name_falls_back_to_profile(self, client, db_session, make_user):
        carol = make_user(email="carol@example.com", username=None, name="Carol")
        db_session.add(Comment(title_id="7", user_id=carol.id, author_name=None, text="Legacy"))
        db_session.commit()

        data = client.get("/comments", params={"titleId": "7"}).json()
        assert data[0]["authorName"] == "Carol"
