"""
Tests for django-blog-cms models.
"""
import pytest
from django.contrib.auth import get_user_model

from blog_cms.models import (
    Bookmark,
    Category,
    Comment,
    Like,
    Post,
    Profile,
    Tag,
    generate_unique_slug,
    is_admin,
)

User = get_user_model()


class TestProfile:
    """Tests for Profile and role helpers."""

    def test_profile_created_with_user(self, db):
        """New users get a USER profile automatically."""
        user = User.objects.create_user(username="a@example.com", email="a@example.com")
        assert user.profile.role == Profile.USER
        assert not user.profile.is_email_verified

    def test_display_name_falls_back_to_username(self, user):
        """Profiles without a name show the username."""
        user.profile.name = ""
        assert user.profile.display_name == "test@example.com"

    def test_is_admin(self, user, admin_user):
        """Only ADMIN role and superusers count as admins."""
        assert not is_admin(user)
        assert is_admin(admin_user)
        user.is_superuser = True
        assert is_admin(user)

    def test_mark_email_verified(self, user):
        """Verification stamps a timestamp."""
        user.profile.mark_email_verified()
        user.profile.refresh_from_db()
        assert user.profile.is_email_verified


class TestCategory:
    """Tests for Category model."""

    def test_create_category(self, db):
        """Slug is derived from the name."""
        cat = Category.objects.create(name="My Category")
        assert cat.slug == "my-category"

    def test_post_count_only_published(self, category, post, user):
        """Drafts do not count towards a category."""
        Post.objects.create(title="Hidden", content="x", author=user, category=category)
        assert category.post_count == 1


class TestTag:
    """Tests for Tag model."""

    def test_create_tag(self, db):
        """Test creating a tag."""
        tag = Tag.objects.create(name="Django")
        assert tag.slug == "django"

    def test_tag_post_count(self, tag, post):
        """Test tag post count property."""
        post.tags.add(tag)
        assert tag.post_count == 1

    def test_get_or_create_many(self, tag):
        """Existing tags are reused, blanks and duplicates skipped."""
        tags = Tag.get_or_create_many(["test-tag", "New", " ", "New"])
        assert [t.name for t in tags] == ["test-tag", "New"]
        assert tags[0] == tag
        assert Tag.objects.count() == 2


class TestPost:
    """Tests for Post model."""

    def test_create_post(self, user):
        """New posts are drafts with a slug from the title."""
        post = Post.objects.create(title="Hello World", content="Hi", author=user)
        assert post.slug == "hello-world"
        assert post.status == Post.DRAFT
        assert not post.is_published

    def test_slug_collision(self, user):
        """Clashing titles get numbered slugs."""
        first = Post.objects.create(title="Same", content="a", author=user)
        second = Post.objects.create(title="Same", content="b", author=user)
        third = Post.objects.create(title="Same", content="c", author=user)
        assert first.slug == "same"
        assert second.slug == "same-1"
        assert third.slug == "same-2"

    def test_unique_slug_excludes_self(self, post):
        """Retitling to the same title keeps the slug."""
        assert generate_unique_slug(Post, post.title, exclude_pk=post.pk) == "test-post"

    def test_retitle(self, post, user):
        """A new title regenerates the slug."""
        Post.objects.create(title="Renamed", content="x", author=user)
        post.retitle("Renamed")
        post.save()
        assert post.slug == "renamed-1"

    def test_publish_unpublish(self, draft):
        """publish() sets the timestamp, unpublish() clears it."""
        draft.publish()
        assert draft.is_published
        assert draft.published_at is not None
        assert Post.objects.published().filter(pk=draft.pk).exists()

        draft.unpublish()
        assert draft.status == Post.DRAFT
        assert draft.published_at is None
        assert Post.objects.drafts().filter(pk=draft.pk).exists()

    def test_preview(self, user):
        """Long content is truncated when there is no excerpt."""
        post = Post.objects.create(title="Long", content="x" * 300, author=user)
        assert post.preview.endswith("...")
        assert len(post.preview) == 283
        post.excerpt = "Short summary"
        assert post.preview == "Short summary"

    def test_permissions(self, draft, user, other_user, admin_user):
        """Drafts are visible to their author and admins only."""
        assert draft.can_edit(user)
        assert draft.can_edit(admin_user)
        assert not draft.can_edit(other_user)
        assert not draft.can_view(other_user)

    def test_increment_view_count(self, post):
        """Test view count increment."""
        post.increment_view_count()
        post.increment_view_count()
        post.refresh_from_db()
        assert post.view_count == 2

    def test_with_counts(self, post, user, other_user):
        """Annotated counts match likes and comments."""
        Like.add(post, user)
        Like.add(post, other_user)
        Comment.objects.create(post=post, author=user, content="Nice")
        annotated = Post.objects.with_counts().get(pk=post.pk)
        assert annotated.like_count == 2
        assert annotated.comment_count == 1


class TestComment:
    """Tests for Comment model."""

    def test_reply(self, post, user, other_user):
        """Replies hang off their parent."""
        parent = Comment.objects.create(post=post, author=user, content="First")
        reply = Comment.objects.create(
            post=post, author=other_user, parent=parent, content="Reply"
        )
        assert reply.is_reply
        assert list(parent.replies.all()) == [reply]

    def test_delete_parent_removes_replies(self, post, user):
        """Deleting a comment deletes its replies."""
        parent = Comment.objects.create(post=post, author=user, content="First")
        Comment.objects.create(post=post, author=user, parent=parent, content="Reply")
        parent.delete()
        assert Comment.objects.count() == 0

    def test_edit(self, post, user):
        """Editing flags the comment."""
        comment = Comment.objects.create(post=post, author=user, content="Tpyo")
        comment.edit("Typo")
        comment.refresh_from_db()
        assert comment.content == "Typo"
        assert comment.is_edited


class TestPostMarks:
    """Tests for likes and bookmarks."""

    @pytest.mark.parametrize("model", [Like, Bookmark])
    def test_add_is_idempotent(self, model, post, user):
        """A second add reports the existing mark."""
        first, created = model.add(post, user)
        assert created
        second, created = model.add(post, user)
        assert not created
        assert first.pk == second.pk
        assert model.objects.count() == 1

    @pytest.mark.parametrize("model", [Like, Bookmark])
    def test_remove(self, model, post, user):
        """remove() reports whether there was anything to remove."""
        model.add(post, user)
        assert model.exists_for(post.pk, user)
        assert model.remove(post.pk, user)
        assert not model.remove(post.pk, user)
        assert not model.exists_for(post.pk, user)

    def test_deleting_post_cascades(self, post, user):
        """Likes, bookmarks and comments go with the post."""
        Like.add(post, user)
        Bookmark.add(post, user)
        Comment.objects.create(post=post, author=user, content="Hi")
        post.delete()
        assert not Like.objects.exists()
        assert not Bookmark.objects.exists()
        assert not Comment.objects.exists()
