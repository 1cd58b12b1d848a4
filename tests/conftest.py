"""
Shared fixtures for django-blog-cms tests.
"""
import json

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from blog_cms.models import Category, Post, Profile, Tag

User = get_user_model()


def make_user(email, name="", role=Profile.USER, password="testpass123"):
    user = User.objects.create_user(username=email, email=email, password=password)
    profile = user.profile
    profile.name = name
    profile.role = role
    profile.save()
    return user


@pytest.fixture
def user(db):
    """Create a regular test user."""
    return make_user("test@example.com", name="Test User")


@pytest.fixture
def other_user(db):
    return make_user("other@example.com", name="Other User")


@pytest.fixture
def admin_user(db):
    """Create a user with the ADMIN role."""
    return make_user("admin@example.com", name="Admin", role=Profile.ADMIN)


@pytest.fixture
def category(db):
    """Create a test category."""
    return Category.objects.create(name="Test Category", slug="test-category")


@pytest.fixture
def tag(db):
    """Create a test tag."""
    return Tag.objects.create(name="test-tag", slug="test-tag")


@pytest.fixture
def post(db, user, category):
    """Create a published test post."""
    post = Post(
        title="Test Post",
        content="This is a test post body.",
        author=user,
        category=category,
    )
    post.set_published(True)
    post.save()
    return post


@pytest.fixture
def draft(db, user):
    """Create an unpublished post."""
    return Post.objects.create(title="Draft Post", content="Not yet.", author=user)


class JsonClient(Client):
    """Test client that sends dict bodies as JSON."""

    def _json(self, method, path, data=None, **extra):
        body = json.dumps(data) if data is not None else ""
        return getattr(super(), method)(
            path, body, content_type="application/json", **extra
        )

    def post_json(self, path, data=None, **extra):
        return self._json("post", path, data, **extra)

    def put_json(self, path, data=None, **extra):
        return self._json("put", path, data, **extra)


@pytest.fixture
def api():
    """Anonymous JSON client."""
    return JsonClient()


@pytest.fixture
def user_api(user):
    client = JsonClient()
    client.force_login(user)
    return client


@pytest.fixture
def other_api(other_user):
    client = JsonClient()
    client.force_login(other_user)
    return client


@pytest.fixture
def admin_api(admin_user):
    client = JsonClient()
    client.force_login(admin_user)
    return client
