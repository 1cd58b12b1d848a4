"""
Tests for the comment API.
"""
import pytest

from blog_cms.models import Comment, Post


@pytest.fixture
def comment(post, user):
    return Comment.objects.create(post=post, author=user, content="First!")


class TestPostComments:
    """Tests for /api/posts/<id>/comments."""

    def test_create(self, other_api, post):
        response = other_api.post_json(f"/api/posts/{post.pk}/comments", {"content": "Nice post"})
        assert response.status_code == 201
        data = response.json()["comment"]
        assert data["content"] == "Nice post"
        assert data["author"]["name"] == "Other User"
        assert data["parent_id"] is None

    def test_reply(self, other_api, post, comment):
        response = other_api.post_json(f"/api/posts/{post.pk}/comments", {
            "content": "Agreed", "parent_id": comment.pk,
        })
        assert response.status_code == 201
        assert comment.replies.count() == 1

    def test_reply_to_other_posts_comment(self, other_api, comment, user):
        elsewhere = Post.objects.create(title="Elsewhere", content="x", author=user)
        response = other_api.post_json(f"/api/posts/{elsewhere.pk}/comments", {
            "content": "Wrong thread", "parent_id": comment.pk,
        })
        assert response.status_code == 400
        assert response.json()["error"] == "Parent comment does not belong to this post"

    def test_unknown_parent(self, other_api, post):
        response = other_api.post_json(f"/api/posts/{post.pk}/comments", {
            "content": "Hello", "parent_id": 999,
        })
        assert response.status_code == 404
        assert response.json()["error"] == "Parent comment not found"

    def test_unknown_post(self, other_api, db):
        response = other_api.post_json("/api/posts/999/comments", {"content": "Hello"})
        assert response.status_code == 404

    def test_requires_login(self, api, post):
        response = api.post_json(f"/api/posts/{post.pk}/comments", {"content": "Hi"})
        assert response.status_code == 401

    @pytest.mark.parametrize("content, message", [
        ("", "Comment cannot be empty"),
        ("x" * 1001, "Comment must be less than 1000 characters"),
    ])
    def test_content_validation(self, user_api, post, content, message):
        response = user_api.post_json(f"/api/posts/{post.pk}/comments", {"content": content})
        assert response.status_code == 400
        assert response.json()["details"]["content"][0]["message"] == message

    def test_list_threads(self, api, post, user, other_user):
        older = Comment.objects.create(post=post, author=user, content="Older")
        newer = Comment.objects.create(post=post, author=user, content="Newer")
        first_reply = Comment.objects.create(
            post=post, author=other_user, parent=older, content="Reply 1"
        )
        second_reply = Comment.objects.create(
            post=post, author=user, parent=older, content="Reply 2"
        )

        data = api.get(f"/api/posts/{post.pk}/comments").json()
        assert [c["id"] for c in data["comments"]] == [newer.pk, older.pk]
        assert data["pagination"]["total"] == 2

        thread = data["comments"][1]
        assert [r["id"] for r in thread["replies"]] == [first_reply.pk, second_reply.pk]
        assert thread["counts"]["replies"] == 2


class TestCommentDetail:
    """Tests for /api/comments/<id>."""

    def test_get(self, api, comment, post):
        data = api.get(f"/api/comments/{comment.pk}").json()["comment"]
        assert data["post"] == {"id": post.pk, "title": post.title, "slug": post.slug}
        assert data["replies"] == []

    def test_get_missing(self, api, db):
        assert api.get("/api/comments/999").status_code == 404

    def test_owner_edits(self, user_api, comment):
        response = user_api.put_json(f"/api/comments/{comment.pk}", {"content": "Edited"})
        assert response.status_code == 200
        assert response.json()["comment"]["is_edited"] is True

    def test_stranger_cannot_edit(self, other_api, comment):
        response = other_api.put_json(f"/api/comments/{comment.pk}", {"content": "Mine now"})
        assert response.status_code == 403

    def test_admin_deletes_thread(self, admin_api, comment, post, other_user):
        Comment.objects.create(post=post, author=other_user, parent=comment, content="Reply")
        response = admin_api.delete(f"/api/comments/{comment.pk}")
        assert response.status_code == 200
        assert not Comment.objects.exists()
