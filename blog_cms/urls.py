"""
URL configuration for django-blog-cms.

Include in your project urls.py:

    path('', include('blog_cms.urls')),

and point LOGIN_URL at the sign-in page:

    LOGIN_URL = 'blog_cms:signin'
"""
from django.contrib.auth.views import LogoutView
from django.urls import include, path

from .models import Bookmark, Like
from .views import (
    accounts,
    analytics,
    auth,
    comments,
    dashboard,
    pages,
    posts,
    taxonomy,
    uploads,
    users,
)

app_name = "blog_cms"

api_patterns = [
    # Auth
    path("auth/send-otp", auth.SendOTPView.as_view(), name="api_send_otp"),
    path("auth/verify-otp", auth.VerifyOTPView.as_view(), name="api_verify_otp"),
    path("auth/signin", auth.SignInView.as_view(), name="api_signin"),
    path("auth/signout", auth.SignOutView.as_view(), name="api_signout"),
    path("auth/session", auth.SessionView.as_view(), name="api_session"),

    # Posts
    path("posts", posts.PostListCreateView.as_view(), name="api_posts"),
    path("posts/<int:pk>", posts.PostDetailView.as_view(), name="api_post"),

    # Likes and bookmarks
    path("posts/<int:pk>/like", posts.LikeView.as_view(), name="api_like"),
    path("posts/<int:pk>/like/count", posts.LikeCountView.as_view(), name="api_like_count"),
    path("posts/<int:pk>/like/status", posts.LikeStatusView.as_view(), name="api_like_status"),
    path("posts/<int:pk>/bookmark", posts.BookmarkView.as_view(), name="api_bookmark"),
    path(
        "posts/<int:pk>/bookmark/status",
        posts.BookmarkStatusView.as_view(),
        name="api_bookmark_status",
    ),
    path("bookmarks", posts.BookmarkListView.as_view(), name="api_bookmarks"),

    # Comments
    path("posts/<int:pk>/comments", comments.PostCommentsView.as_view(), name="api_post_comments"),
    path("comments/<int:pk>", comments.CommentDetailView.as_view(), name="api_comment"),

    # Categories and tags
    path("categories", taxonomy.CategoryListCreateView.as_view(), name="api_categories"),
    path("categories/<int:pk>", taxonomy.CategoryDetailView.as_view(), name="api_category"),
    path("tags", taxonomy.TagListCreateView.as_view(), name="api_tags"),

    # Users and uploads
    path("users/<int:pk>", users.UserDetailView.as_view(), name="api_user"),
    path("upload", uploads.UploadView.as_view(), name="api_upload"),

    # Admin
    path("admin/stats", dashboard.AdminStatsView.as_view(), name="api_admin_stats"),
    path("admin/posts", dashboard.AdminPostListView.as_view(), name="api_admin_posts"),
    path("admin/comments", dashboard.AdminCommentListView.as_view(), name="api_admin_comments"),
    path("admin/about", dashboard.AdminAboutView.as_view(), name="api_admin_about"),

    # Analytics
    path("analytics/track", analytics.TrackView.as_view(), name="api_track"),
    path("analytics/session-end", analytics.SessionEndView.as_view(), name="api_session_end"),
    path(
        "analytics/dashboard",
        analytics.AnalyticsDashboardView.as_view(),
        name="api_analytics_dashboard",
    ),
]

urlpatterns = [
    # Post list and detail
    path("", pages.PostListView.as_view(), name="home"),
    path("posts/", pages.PostListView.as_view(), name="post_list"),
    path("write/", pages.PostCreateView.as_view(), name="post_create"),
    path("posts/<slug:slug>/", pages.PostDetailView.as_view(), name="post_detail"),
    path("posts/<slug:slug>/edit/", pages.PostUpdateView.as_view(), name="post_update"),

    # Comments, likes and bookmarks
    path("posts/<slug:slug>/comment/", pages.CommentCreateView.as_view(), name="comment_create"),
    path(
        "posts/<slug:slug>/like/",
        pages.PostMarkToggleView.as_view(model=Like),
        name="like_toggle",
    ),
    path(
        "posts/<slug:slug>/bookmark/",
        pages.PostMarkToggleView.as_view(model=Bookmark),
        name="bookmark_toggle",
    ),

    # Categories and tags
    path("categories/", pages.CategoryListView.as_view(), name="category_list"),
    path("category/<slug:slug>/", pages.CategoryPostListView.as_view(), name="category_detail"),
    path("tag/<slug:slug>/", pages.TagPostListView.as_view(), name="tag_detail"),

    # Accounts
    path("auth/signup/", accounts.SignUpPageView.as_view(), name="signup"),
    path("auth/signin/", accounts.SignInPageView.as_view(), name="signin"),
    path("auth/signin/code/", accounts.SignInCodePageView.as_view(), name="signin_code"),
    path(
        "auth/forgot-password/",
        accounts.ForgotPasswordPageView.as_view(),
        name="forgot_password",
    ),
    path("auth/verify/", accounts.VerifyCodePageView.as_view(), name="verify_code"),
    path("auth/signout/", LogoutView.as_view(next_page="blog_cms:home"), name="signout"),
    path("profile/", accounts.ProfileUpdateView.as_view(), name="profile"),

    # Pages
    path("about/", pages.AboutView.as_view(), name="about"),
    path("my-posts/", pages.MyPostsView.as_view(), name="my_posts"),
    path("dashboard/", pages.DashboardView.as_view(), name="dashboard"),

    # JSON API
    path("api/", include(api_patterns)),
]
