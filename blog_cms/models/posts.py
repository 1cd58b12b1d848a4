"""
Post, Category, Tag and AboutPage models for django-blog-cms.
"""
from django.conf import settings
from django.db import models
from django.urls import reverse
from django.utils import timezone
from django.utils.text import slugify

from ..conf import blog_settings


def slugify_name(value, fallback="item"):
    """Slugify value, truncated to SLUG_MAX_LENGTH, or fallback when nothing survives."""
    return slugify(value)[:blog_settings.SLUG_MAX_LENGTH].strip("-") or fallback


def generate_unique_slug(model, value, exclude_pk=None, fallback="item"):
    """
    Slugify value and append -1, -2, ... until no other row uses it.

    Args:
        model: model class with a unique ``slug`` field
        value: text to slugify (title, name)
        exclude_pk: primary key of the row being updated, if any
        fallback: slug base used when value slugifies to nothing

    Returns:
        Slug string
    """
    base_slug = slugify_name(value, fallback)
    slug = base_slug
    counter = 1
    while model.objects.filter(slug=slug).exclude(pk=exclude_pk).exists():
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


class Category(models.Model):
    """Category for organizing posts. Each post has at most one."""

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Categories"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify_name(self.name, fallback="category")
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_cms:category_detail", kwargs={"slug": self.slug})

    @property
    def post_count(self):
        """Return count of published posts in this category."""
        return self.posts.published().count()


class Tag(models.Model):
    """
    Flat tag for posts.

    Tags are created on the fly when a post names one that does not exist.
    """

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = generate_unique_slug(Tag, self.name, self.pk, fallback="tag")
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_cms:tag_detail", kwargs={"slug": self.slug})

    @property
    def post_count(self):
        """Return count of posts with this tag."""
        return self.posts.count()

    @classmethod
    def get_or_create_many(cls, names):
        """Return Tag objects for names, creating the missing ones."""
        tags = []
        for name in names:
            name = name.strip()
            if not name:
                continue
            tag, _ = cls.objects.get_or_create(name=name)
            if tag not in tags:
                tags.append(tag)
        return tags


class PostQuerySet(models.QuerySet):
    def published(self):
        return self.filter(status=Post.PUBLISHED, published_at__isnull=False)

    def drafts(self):
        return self.filter(published_at__isnull=True)

    def with_counts(self):
        return self.annotate(
            like_count=models.Count("likes", distinct=True),
            comment_count=models.Count("comments", distinct=True),
        )


class Post(models.Model):
    """
    Blog post / article.

    A post is published when status is PUBLISHED and published_at is set;
    publish() and unpublish() keep the two in step.
    """

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (PUBLISHED, "Published"),
    ]

    # Content
    title = models.CharField(max_length=blog_settings.POST_TITLE_MAX_LENGTH)
    slug = models.SlugField(max_length=255, unique=True)
    content = models.TextField()
    excerpt = models.TextField(
        blank=True,
        max_length=blog_settings.EXCERPT_MAX_LENGTH,
        help_text="Optional manual excerpt. Auto-generated if blank.",
    )
    cover_image = models.CharField(max_length=500, blank=True)

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_posts",
    )

    # Status
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=DRAFT)
    published_at = models.DateTimeField(null=True, blank=True, db_index=True)

    # Taxonomy
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="posts",
    )
    tags = models.ManyToManyField(Tag, related_name="posts", blank=True)

    # Engagement stats
    view_count = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = [models.F("published_at").desc(nulls_last=True), "-created_at"]
        indexes = [
            models.Index(fields=["status", "-published_at"]),
            models.Index(fields=["author", "-created_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = generate_unique_slug(Post, self.title, self.pk, fallback="post")
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("blog_cms:post_detail", kwargs={"slug": self.slug})

    @property
    def preview(self):
        """Return truncated content for list display."""
        if self.excerpt:
            return self.excerpt
        if len(self.content) > 280:
            return self.content[:280] + "..."
        return self.content

    @property
    def is_published(self):
        return self.status == self.PUBLISHED and self.published_at is not None

    def can_edit(self, user):
        """Authors edit their own posts; admins edit everything."""
        from .users import is_admin

        if not user.is_authenticated:
            return False
        return user.pk == self.author_id or is_admin(user)

    def can_view(self, user):
        """Published posts are public; drafts only for their author and admins."""
        if self.is_published:
            return True
        return self.can_edit(user)

    def retitle(self, title):
        """Change the title and derive a new unique slug from it."""
        self.title = title
        self.slug = generate_unique_slug(Post, title, self.pk, fallback="post")

    def set_published(self, published):
        """Set status and published_at without saving."""
        if published:
            self.status = self.PUBLISHED
            self.published_at = timezone.now()
        else:
            self.status = self.DRAFT
            self.published_at = None

    def publish(self):
        """Publish the post immediately."""
        self.set_published(True)
        self.save(update_fields=["status", "published_at", "updated_at"])

    def unpublish(self):
        """Move the post back to drafts."""
        self.set_published(False)
        self.save(update_fields=["status", "published_at", "updated_at"])

    def increment_view_count(self):
        """Increment view count atomically."""
        Post.objects.filter(pk=self.pk).update(view_count=models.F("view_count") + 1)


class AboutPage(models.Model):
    """
    Content of the public about page.

    Only the first row is ever used; the admin endpoint upserts it.
    """

    profile_image = models.CharField(max_length=500, blank=True)
    name = models.CharField(max_length=255, blank=True)
    title = models.CharField(max_length=255, blank=True)
    about_me = models.TextField(blank=True)
    education = models.TextField(blank=True)
    experience = models.TextField(blank=True)
    research_interests = models.TextField(blank=True)
    publications = models.TextField(blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)
    contact_location = models.CharField(max_length=255, blank=True)
    blog_purpose = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    EDITABLE_FIELDS = [
        "profile_image",
        "name",
        "title",
        "about_me",
        "education",
        "experience",
        "research_interests",
        "publications",
        "contact_email",
        "contact_phone",
        "contact_location",
        "blog_purpose",
    ]

    class Meta:
        verbose_name = "About Page"
        verbose_name_plural = "About Page"

    def __str__(self):
        return self.name or "About page"

    @classmethod
    def current(cls):
        """Return the about page, or None when it has not been written yet."""
        return cls.objects.order_by("pk").first()
