"""
Comment, Like and Bookmark models for django-blog-cms.
"""
from django.conf import settings
from django.db import IntegrityError, models, transaction

from ..conf import blog_settings


class Comment(models.Model):
    """
    Comment on a post.

    Replies point at their parent through the parent field. Deleting a
    comment deletes its replies with it.
    """

    post = models.ForeignKey(
        "blog_cms.Post",
        on_delete=models.CASCADE,
        related_name="comments",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_comments",
    )
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="replies",
    )
    content = models.TextField(max_length=blog_settings.COMMENT_MAX_LENGTH)
    is_edited = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["post", "parent", "created_at"]),
        ]

    def __str__(self):
        return f"Comment by {self.author} on {self.post}"

    @property
    def preview(self):
        """Return truncated content for admin display."""
        if len(self.content) > 100:
            return self.content[:100] + "..."
        return self.content

    @property
    def is_reply(self):
        """Check if this is a reply to another comment."""
        return self.parent_id is not None

    def can_edit(self, user):
        from .users import is_admin

        if not user.is_authenticated:
            return False
        return user.pk == self.author_id or is_admin(user)

    def edit(self, new_content):
        """Replace the content and flag the comment as edited."""
        self.content = new_content
        self.is_edited = True
        self.save(update_fields=["content", "is_edited", "updated_at"])


class PostMarkQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(user=user)


class PostMark(models.Model):
    """
    A user's one-per-post mark on a post (like, bookmark).

    Uniqueness of (user, post) is enforced by the database.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    post = models.ForeignKey("blog_cms.Post", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PostMarkQuerySet.as_manager()

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    @classmethod
    def add(cls, post, user):
        """
        Mark post for user.

        Returns (mark, created). created is False when the user had
        already marked the post.
        """
        try:
            with transaction.atomic():
                return cls.objects.create(post=post, user=user), True
        except IntegrityError:
            return cls.objects.get(post=post, user=user), False

    @classmethod
    def remove(cls, post_id, user):
        """Remove the user's mark. Returns True if one existed."""
        deleted, _ = cls.objects.filter(post_id=post_id, user=user).delete()
        return deleted > 0

    @classmethod
    def exists_for(cls, post_id, user):
        if not user.is_authenticated:
            return False
        return cls.objects.filter(post_id=post_id, user=user).exists()


class Like(PostMark):
    """A user's like on a post."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_likes",
    )
    post = models.ForeignKey(
        "blog_cms.Post",
        on_delete=models.CASCADE,
        related_name="likes",
    )

    class Meta(PostMark.Meta):
        constraints = [
            models.UniqueConstraint(fields=["user", "post"], name="unique_like_per_user"),
        ]

    def __str__(self):
        return f"{self.user} likes {self.post}"


class Bookmark(PostMark):
    """A post saved by a user for later reading."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_bookmarks",
    )
    post = models.ForeignKey(
        "blog_cms.Post",
        on_delete=models.CASCADE,
        related_name="bookmarks",
    )

    class Meta(PostMark.Meta):
        constraints = [
            models.UniqueConstraint(fields=["user", "post"], name="unique_bookmark_per_user"),
        ]

    def __str__(self):
        return f"{self.user} bookmarked {self.post}"
