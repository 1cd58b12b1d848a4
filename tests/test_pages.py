"""
Tests for the server-rendered pages.
"""
from django.contrib.auth import SESSION_KEY, get_user_model
from django.core import mail
from django.test import Client

from blog_cms.models import (
    AboutPage,
    Bookmark,
    Comment,
    Like,
    Post,
    Profile,
    VerificationToken,
)

User = get_user_model()


class TestPostPages:
    def test_home_lists_published(self, client, post, draft):
        response = client.get("/")
        assert response.status_code == 200
        assert list(response.context["posts"]) == [post]
        assert b"Test Post" in response.content

    def test_pagination(self, client, user):
        for i in range(6):
            p = Post(title=f"Post {i}", content="x", author=user)
            p.set_published(True)
            p.save()
        response = client.get("/posts/")
        assert response.context["is_paginated"]
        assert len(response.context["posts"]) == 5

    def test_detail_counts_view(self, client, post, user):
        Comment.objects.create(post=post, author=user, content="Great read")
        response = client.get(post.get_absolute_url())
        assert response.status_code == 200
        assert b"Great read" in response.content
        post.refresh_from_db()
        assert post.view_count == 1

    def test_draft_hidden_from_public(self, client, draft):
        assert client.get(draft.get_absolute_url()).status_code == 404

    def test_draft_visible_to_author(self, draft, user):
        client = Client()
        client.force_login(user)
        assert client.get(draft.get_absolute_url()).status_code == 200

    def test_related_posts(self, client, post, user, category):
        sibling = Post(title="Sibling", content="x", author=user, category=category)
        sibling.set_published(True)
        sibling.save()
        response = client.get(post.get_absolute_url())
        assert list(response.context["related_posts"]) == [sibling]


class TestTaxonomyPages:
    def test_category_list(self, client, category, post):
        response = client.get("/categories/")
        assert response.context["categories"][0].published_posts == 1

    def test_category_detail(self, client, category, post):
        response = client.get(category.get_absolute_url())
        assert response.status_code == 200
        assert list(response.context["posts"]) == [post]

    def test_tag_detail(self, client, tag, post):
        post.tags.add(tag)
        response = client.get(tag.get_absolute_url())
        assert list(response.context["posts"]) == [post]

    def test_unknown_tag(self, client, db):
        assert client.get("/tag/missing/").status_code == 404


class TestAccountPages:
    def test_about(self, client, db):
        assert client.get("/about/").status_code == 404
        AboutPage.objects.create(name="Dr. Rivera", about_me="Hi there")
        assert b"Dr. Rivera" in client.get("/about/").content

    def test_my_posts_requires_login(self, client, db):
        response = client.get("/my-posts/")
        assert response.status_code == 302

    def test_my_posts(self, client, user, post, draft, other_user):
        theirs = Post(title="Theirs", content="x", author=other_user)
        theirs.set_published(True)
        theirs.save()
        Bookmark.add(theirs, user)

        client.force_login(user)
        response = client.get("/my-posts/")
        assert set(response.context["posts"]) == {post, draft}
        assert list(response.context["bookmarks"]) == [theirs]

    def test_dashboard_admin_only(self, client, user, admin_user):
        client.force_login(user)
        assert client.get("/dashboard/").status_code == 403

        client.force_login(admin_user)
        response = client.get("/dashboard/")
        assert response.status_code == 200
        assert response.context["stats"]["overview"]["total_users"] == 2


def logged_in_user_id(client):
    return int(client.session[SESSION_KEY]) if SESSION_KEY in client.session else None


def emailed_code():
    return VerificationToken.objects.get().token


class TestSignUpPages:
    def test_signup_with_code(self, client, db):
        response = client.post("/auth/signup/", {"name": "New Person", "email": "New@Example.com"})
        assert response.status_code == 302
        assert response.url == "/auth/verify/"
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["new@example.com"]

        response = client.post("/auth/verify/", {
            "code": emailed_code(),
            "password": "longenough",
            "confirm_password": "longenough",
        })
        assert response.status_code == 302
        assert response.url == "/"

        user = User.objects.get(email="new@example.com")
        assert user.check_password("longenough")
        assert user.profile.name == "New Person"
        assert user.profile.role == Profile.USER
        assert user.profile.is_email_verified
        assert logged_in_user_id(client) == user.pk
        assert not VerificationToken.objects.exists()

    def test_existing_email(self, client, user):
        response = client.post("/auth/signup/", {"name": "Again", "email": user.email})
        assert response.status_code == 200
        assert response.context["form"].errors["email"] == ["User already exists"]
        assert not mail.outbox

    def test_wrong_code(self, client, db):
        client.post("/auth/signup/", {"name": "New Person", "email": "new@example.com"})
        response = client.post("/auth/verify/", {
            "code": "000000",
            "password": "longenough",
            "confirm_password": "longenough",
        })
        assert response.status_code == 200
        assert response.context["form"].errors["code"] == ["Invalid or expired OTP"]
        assert not User.objects.filter(email="new@example.com").exists()

    def test_passwords_must_match(self, client, db):
        client.post("/auth/signup/", {"name": "New Person", "email": "new@example.com"})
        response = client.post("/auth/verify/", {
            "code": emailed_code(),
            "password": "longenough",
            "confirm_password": "different1",
        })
        assert response.context["form"].errors["confirm_password"] == ["Passwords do not match"]
        assert VerificationToken.objects.exists()

    def test_verify_needs_pending_code(self, client, db):
        response = client.get("/auth/verify/")
        assert response.status_code == 302
        assert response.url == "/auth/signin/"


class TestSignInPages:
    def test_password_signin(self, client, user):
        response = client.post("/auth/signin/", {
            "email": "Test@Example.com", "password": "testpass123",
        })
        assert response.status_code == 302
        assert response.url == "/"
        assert logged_in_user_id(client) == user.pk

    def test_password_signin_follows_next(self, client, user):
        response = client.post("/auth/signin/?next=/my-posts/", {
            "email": user.email, "password": "testpass123", "next": "/my-posts/",
        })
        assert response.url == "/my-posts/"

    def test_bad_password(self, client, user):
        response = client.post("/auth/signin/", {"email": user.email, "password": "wrong"})
        assert response.status_code == 200
        assert response.context["form"].non_field_errors() == ["Invalid email or password"]
        assert logged_in_user_id(client) is None

    def test_login_required_redirects_to_signin(self, client, db):
        response = client.get("/my-posts/")
        assert response.url.startswith("/auth/signin/")

    def test_signin_with_code(self, client, user):
        response = client.post("/auth/signin/code/", {"email": user.email})
        assert response.url == "/auth/verify/"

        response = client.post("/auth/verify/", {"code": emailed_code()})
        assert response.status_code == 302
        assert logged_in_user_id(client) == user.pk
        user.profile.refresh_from_db()
        assert user.profile.is_email_verified

    def test_code_for_unknown_email(self, client, db):
        response = client.post("/auth/signin/code/", {"email": "nobody@example.com"})
        assert response.context["form"].errors["email"] == ["No account found"]

    def test_forgot_password(self, client, user):
        client.post("/auth/forgot-password/", {"email": user.email})
        assert mail.outbox[0].subject == "Password Reset Verification Code"

        response = client.post("/auth/verify/", {
            "code": emailed_code(),
            "password": "brandnew99",
            "confirm_password": "brandnew99",
        })
        assert response.url == "/auth/signin/"
        user.refresh_from_db()
        assert user.check_password("brandnew99")
        assert logged_in_user_id(client) is None

    def test_signout(self, client, user):
        client.force_login(user)
        response = client.post("/auth/signout/")
        assert response.status_code == 302
        assert logged_in_user_id(client) is None


class TestPostEditingPages:
    def form_data(self, **overrides):
        data = {
            "title": "Fresh Post",
            "content": "Body text",
            "excerpt": "",
            "cover_image": "",
            "category": "",
            "tag_names": "",
        }
        data.update(overrides)
        return data

    def test_write_is_admin_only(self, client, user):
        assert client.get("/write/").status_code == 302
        client.force_login(user)
        assert client.get("/write/").status_code == 403

    def test_create_published(self, client, admin_user, category):
        client.force_login(admin_user)
        response = client.post("/write/", self.form_data(
            category=category.pk, tag_names="django, web, django", published="on",
        ))
        post = Post.objects.get()
        assert response.status_code == 302
        assert response.url == post.get_absolute_url()
        assert post.slug == "fresh-post"
        assert post.author == admin_user
        assert post.category == category
        assert post.is_published
        assert sorted(t.name for t in post.tags.all()) == ["django", "web"]

    def test_create_draft(self, client, admin_user):
        client.force_login(admin_user)
        client.post("/write/", self.form_data())
        assert Post.objects.get().status == Post.DRAFT

    def test_missing_title(self, client, admin_user):
        client.force_login(admin_user)
        response = client.post("/write/", self.form_data(title=""))
        assert response.status_code == 200
        assert "title" in response.context["form"].errors
        assert not Post.objects.exists()

    def test_edit_own_post(self, client, user, post):
        published_at = post.published_at
        client.force_login(user)
        response = client.get(f"/posts/{post.slug}/edit/")
        assert response.context["form"].initial["published"] is True

        response = client.post(f"/posts/{post.slug}/edit/", self.form_data(
            title="Renamed", tag_names="python", published="on",
        ))
        post.refresh_from_db()
        assert response.url == "/posts/renamed/"
        assert post.title == "Renamed"
        assert post.published_at == published_at
        assert [t.name for t in post.tags.all()] == ["python"]

    def test_unchecking_published_makes_draft(self, client, user, post):
        client.force_login(user)
        client.post(f"/posts/{post.slug}/edit/", self.form_data(title=post.title))
        post.refresh_from_db()
        assert post.status == Post.DRAFT
        assert post.published_at is None
        assert post.slug == "test-post"

    def test_cannot_edit_others_post(self, client, other_user, post):
        client.force_login(other_user)
        assert client.get(f"/posts/{post.slug}/edit/").status_code == 404

    def test_admin_edits_any_post(self, client, admin_user, post):
        client.force_login(admin_user)
        assert client.get(f"/posts/{post.slug}/edit/").status_code == 200


class TestPostInteractionPages:
    def test_comment(self, client, user, post):
        client.force_login(user)
        response = client.post(f"/posts/{post.slug}/comment/", {"content": "Nice one"})
        assert response.url == post.get_absolute_url()
        comment = Comment.objects.get()
        assert comment.author == user
        assert comment.parent is None

    def test_reply(self, client, user, other_user, post):
        parent = Comment.objects.create(post=post, author=other_user, content="First")
        client.force_login(user)
        client.post(f"/posts/{post.slug}/comment/", {"content": "Agreed", "parent_id": parent.pk})
        assert parent.replies.get().content == "Agreed"

    def test_empty_comment_rejected(self, client, user, post):
        client.force_login(user)
        response = client.post(f"/posts/{post.slug}/comment/", {"content": ""}, follow=True)
        assert not Comment.objects.exists()
        assert "Comment cannot be empty" in [str(m) for m in response.context["messages"]]

    def test_comment_requires_login(self, client, post):
        response = client.post(f"/posts/{post.slug}/comment/", {"content": "Hi"})
        assert response.status_code == 302
        assert not Comment.objects.exists()

    def test_comment_on_hidden_draft(self, client, other_user, draft):
        client.force_login(other_user)
        response = client.post(f"/posts/{draft.slug}/comment/", {"content": "Hi"})
        assert response.status_code == 404

    def test_like_toggle(self, client, user, post):
        client.force_login(user)
        client.post(f"/posts/{post.slug}/like/")
        assert Like.exists_for(post.pk, user)
        assert client.get(post.get_absolute_url()).context["is_liked"]

        client.post(f"/posts/{post.slug}/like/")
        assert not Like.exists_for(post.pk, user)

    def test_bookmark_toggle(self, client, user, post):
        client.force_login(user)
        response = client.post(f"/posts/{post.slug}/bookmark/")
        assert response.url == post.get_absolute_url()
        assert Bookmark.exists_for(post.pk, user)

        client.post(f"/posts/{post.slug}/bookmark/")
        assert not Bookmark.exists_for(post.pk, user)

    def test_detail_shows_forms_when_signed_in(self, client, user, post):
        assert b'name="content"' not in client.get(post.get_absolute_url()).content
        client.force_login(user)
        response = client.get(post.get_absolute_url())
        assert b'name="content"' in response.content
        assert response.context["can_edit"]


class TestProfilePage:
    def test_requires_login(self, client, db):
        assert client.get("/profile/").status_code == 302

    def test_edit_profile(self, client, user, post):
        client.force_login(user)
        response = client.get("/profile/")
        assert response.context["stats"]["total_posts"] == 1

        response = client.post("/profile/", {
            "name": "Renamed User",
            "bio": "Writes things",
            "website": "https://example.com",
            "location": "Lisbon",
            "image": "",
        })
        assert response.status_code == 302
        assert response.url == "/profile/"
        user.profile.refresh_from_db()
        assert user.profile.name == "Renamed User"
        assert user.profile.location == "Lisbon"
