"""
Django admin configuration for blog_cms.
"""
from django.contrib import admin

from .models import (
    AboutPage,
    Bookmark,
    Category,
    Comment,
    Like,
    PageView,
    Post,
    Profile,
    Tag,
    UserSession,
    VerificationToken,
)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "name", "role", "email_verified_at", "created_at"]
    list_filter = ["role", "created_at"]
    search_fields = ["name", "user__email", "user__username"]
    raw_id_fields = ["user"]
    readonly_fields = ["created_at", "updated_at"]
    actions = ["promote_to_admin", "demote_to_user"]

    @admin.action(description="Promote selected users to admin")
    def promote_to_admin(self, request, queryset):
        count = queryset.update(role=Profile.ADMIN)
        self.message_user(request, f"{count} users promoted to admin.")

    @admin.action(description="Demote selected users to regular users")
    def demote_to_user(self, request, queryset):
        count = queryset.update(role=Profile.USER)
        self.message_user(request, f"{count} users demoted.")


@admin.register(VerificationToken)
class VerificationTokenAdmin(admin.ModelAdmin):
    list_display = ["identifier", "purpose", "expires_at", "created_at"]
    list_filter = ["purpose", "created_at"]
    search_fields = ["identifier"]
    # The code itself stays out of list pages
    exclude = ["token"]
    readonly_fields = ["identifier", "purpose", "expires_at", "created_at"]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "created_at"]
    search_fields = ["name", "slug", "description"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["created_at"]


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = [
        "title_preview",
        "author",
        "status",
        "category",
        "view_count",
        "published_at",
        "created_at",
    ]
    list_filter = ["status", "category", "created_at"]
    search_fields = ["title", "content", "author__email", "author__profile__name"]
    raw_id_fields = ["author", "category"]
    filter_horizontal = ["tags"]
    date_hierarchy = "created_at"
    readonly_fields = ["view_count", "created_at", "updated_at", "published_at"]
    prepopulated_fields = {"slug": ("title",)}

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "content", "excerpt", "cover_image", "author")
        }),
        ("Taxonomy", {
            "fields": ("category", "tags")
        }),
        ("Status", {
            "fields": ("status", "published_at")
        }),
        ("Metadata", {
            "fields": ("view_count", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_posts", "unpublish_posts"]

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    @admin.action(description="Publish selected posts")
    def publish_posts(self, request, queryset):
        for post in queryset:
            post.publish()
        self.message_user(request, f"{queryset.count()} posts published.")

    @admin.action(description="Unpublish selected posts")
    def unpublish_posts(self, request, queryset):
        for post in queryset:
            post.unpublish()
        self.message_user(request, f"{queryset.count()} posts moved to drafts.")


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ["preview", "author", "post", "parent", "is_edited", "created_at"]
    list_filter = ["is_edited", "created_at"]
    search_fields = ["content", "author__email", "post__title"]
    raw_id_fields = ["post", "author", "parent"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Like, Bookmark)
class PostMarkAdmin(admin.ModelAdmin):
    list_display = ["user", "post", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["user__email", "post__title"]
    raw_id_fields = ["user", "post"]


@admin.register(AboutPage)
class AboutPageAdmin(admin.ModelAdmin):
    list_display = ["name", "title", "contact_email", "updated_at"]

    def has_add_permission(self, request):
        # Only one about page is ever shown
        return not AboutPage.objects.exists()


@admin.register(PageView)
class PageViewAdmin(admin.ModelAdmin):
    list_display = ["path", "device", "browser", "os", "country", "ip_address", "created_at"]
    list_filter = ["device", "browser", "os", "created_at"]
    search_fields = ["path", "referrer", "ip_address"]
    raw_id_fields = ["user", "post"]
    date_hierarchy = "created_at"


@admin.register(UserSession)
class UserSessionAdmin(admin.ModelAdmin):
    list_display = [
        "session_id",
        "user",
        "page_views",
        "duration",
        "bounced",
        "device",
        "start_time",
    ]
    list_filter = ["bounced", "device", "browser", "start_time"]
    search_fields = ["session_id", "ip_address"]
    raw_id_fields = ["user"]
