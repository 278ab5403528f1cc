"""
Tests for comment endpoints.
"""
from datetime import datetime, timedelta, timezone

from myblog.models import Comment


def _comment(db, post, user, content="A comment", parent=None, minutes_ago=0, **fields):
    created = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    comment = Comment(
        post_id=post.id,
        user_id=user.id,
        content=content,
        parent_id=parent.id if parent else None,
        created_at=created,
        **fields,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


class TestCommentEndpoints:
    """Test comment listing and writing."""

    def test_add_comment(self, client, test_user, other_user, make_post, other_headers, db):
        post = make_post(test_user)

        response = client.post(
            f"/api/posts/{post.id}/comments",
            headers=other_headers,
            json={"content": "  Great read @tester  "},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["body"] == "Great read @tester"
        assert data["author"]["nickname"] == "someone"
        assert data["is_edited"] is False
        assert data["parts"] == [
            {"text": "Great read ", "nickname": None},
            {"text": "@tester", "nickname": "tester"},
        ]

        db.refresh(post)
        assert post.comments_count == 1

    def test_add_comment_blank(self, client, test_user, make_post, auth_headers):
        post = make_post(test_user)
        response = client.post(f"/api/posts/{post.id}/comments", headers=auth_headers, json={"content": "   "})
        assert response.status_code == 422

    def test_add_comment_too_long(self, client, test_user, make_post, auth_headers):
        post = make_post(test_user)
        response = client.post(f"/api/posts/{post.id}/comments", headers=auth_headers, json={"content": "x" * 1001})
        assert response.status_code == 422

    def test_add_comment_requires_auth(self, client, test_user, make_post):
        post = make_post(test_user)
        response = client.post(f"/api/posts/{post.id}/comments", json={"content": "hi"})
        assert response.status_code == 401

    def test_cannot_comment_on_hidden_post(self, client, test_user, make_post, other_headers):
        post = make_post(test_user, is_public=False)
        response = client.post(f"/api/posts/{post.id}/comments", headers=other_headers, json={"content": "hi"})
        assert response.status_code == 404

    def test_reply_to_reply_anchors_on_top_level(self, client, test_user, make_post, auth_headers, db):
        post = make_post(test_user)
        top = _comment(db, post, test_user, "Top")
        reply = _comment(db, post, test_user, "Reply", parent=top)

        response = client.post(
            f"/api/posts/{post.id}/comments",
            headers=auth_headers,
            json={"content": "Reply to the reply", "parent_id": reply.id},
        )
        assert response.status_code == 201
        assert response.json()["parent_id"] == top.id

    def test_reply_to_comment_of_other_post(self, client, test_user, make_post, auth_headers, db):
        post = make_post(test_user)
        elsewhere = _comment(db, make_post(test_user, title="Other"), test_user)

        response = client.post(
            f"/api/posts/{post.id}/comments",
            headers=auth_headers,
            json={"content": "Lost", "parent_id": elsewhere.id},
        )
        assert response.status_code == 422

    def test_reply_to_deleted_comment(self, client, test_user, make_post, auth_headers, db):
        post = make_post(test_user)
        gone = _comment(db, post, test_user, deleted_at=datetime.now(timezone.utc))

        response = client.post(
            f"/api/posts/{post.id}/comments",
            headers=auth_headers,
            json={"content": "Hello?", "parent_id": gone.id},
        )
        assert response.status_code == 422

    def test_list_comments_threads(self, client, test_user, other_user, make_post, db):
        post = make_post(test_user)
        older = _comment(db, post, test_user, "Older", minutes_ago=10)
        newer = _comment(db, post, other_user, "Newer", minutes_ago=5)
        _comment(db, post, other_user, "Second reply", parent=older, minutes_ago=1)
        _comment(db, post, test_user, "First reply", parent=older, minutes_ago=3)

        response = client.get(f"/api/posts/{post.id}/comments")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["has_more"] is False
        assert [t["comment"]["id"] for t in data["threads"]] == [newer.id, older.id]
        replies = data["threads"][1]["replies"]
        assert [r["body"] for r in replies] == ["First reply", "Second reply"]
        assert all(r["reply_parent_id"] == older.id for r in replies)

    def test_list_comments_pages(self, client, test_user, make_post, db):
        post = make_post(test_user)
        for i in range(25):
            _comment(db, post, test_user, f"Comment {i}", minutes_ago=i)

        first = client.get(f"/api/posts/{post.id}/comments").json()
        second = client.get(f"/api/posts/{post.id}/comments", params={"page": 2}).json()
        assert len(first["threads"]) == 20
        assert first["has_more"] is True
        assert len(second["threads"]) == 5
        assert second["has_more"] is False
        assert first["threads"][0]["comment"]["body"] == "Comment 0"

    def test_list_comments_missing_post(self, client):
        response = client.get("/api/posts/999/comments")
        assert response.status_code == 404

    def test_edit_comment(self, client, test_user, make_post, auth_headers, db):
        post = make_post(test_user)
        comment = _comment(db, post, test_user, "Typo", minutes_ago=5)

        response = client.patch(f"/api/comments/{comment.id}", headers=auth_headers, json={"content": "Fixed"})
        assert response.status_code == 200
        assert response.json()["body"] == "Fixed"
        assert response.json()["is_edited"] is True

    def test_edit_comment_not_owner(self, client, test_user, make_post, other_headers, db):
        post = make_post(test_user)
        comment = _comment(db, post, test_user)

        response = client.patch(f"/api/comments/{comment.id}", headers=other_headers, json={"content": "Mine"})
        assert response.status_code == 403

    def test_soft_delete_keeps_replies(self, client, test_user, other_user, make_post, auth_headers, db):
        post = make_post(test_user)
        top = _comment(db, post, test_user, "Top", minutes_ago=5)
        _comment(db, post, other_user, "Reply", parent=top, minutes_ago=1)

        response = client.delete(f"/api/comments/{top.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["is_deleted"] is True
        assert response.json()["body"] == "This comment has been deleted."
        assert response.json()["can_reply"] is False

        listing = client.get(f"/api/posts/{post.id}/comments").json()
        thread = listing["threads"][0]
        assert thread["comment"]["is_deleted"] is True
        assert thread["comment"]["parts"] == []
        assert [r["body"] for r in thread["replies"]] == ["Reply"]

        db.refresh(post)
        assert post.comments_count == 2

    def test_edit_deleted_comment(self, client, test_user, make_post, auth_headers, db):
        post = make_post(test_user)
        comment = _comment(db, post, test_user, deleted_at=datetime.now(timezone.utc))

        response = client.patch(f"/api/comments/{comment.id}", headers=auth_headers, json={"content": "Back"})
        assert response.status_code == 422

    def test_delete_missing_comment(self, client, auth_headers):
        response = client.delete("/api/comments/12345", headers=auth_headers)
        assert response.status_code == 404


class TestCommentLikes:
    """Test liking comments."""

    def test_like_comment(self, client, test_user, make_post, other_headers, db):
        post = make_post(test_user)
        comment = _comment(db, post, test_user)

        response = client.post(f"/api/comments/{comment.id}/like", headers=other_headers)
        assert response.status_code == 200
        assert response.json()["liked"] is True
        assert response.json()["likes_count"] == 1

        db.refresh(comment)
        assert comment.likes_count == 1

        response = client.post(f"/api/comments/{comment.id}/like", headers=other_headers)
        assert response.json()["liked"] is False
        db.refresh(comment)
        assert comment.likes_count == 0

    def test_cannot_like_deleted_comment(self, client, test_user, make_post, auth_headers, db):
        post = make_post(test_user)
        comment = _comment(db, post, test_user, deleted_at=datetime.now(timezone.utc))

        response = client.post(f"/api/comments/{comment.id}/like", headers=auth_headers)
        assert response.status_code == 422
