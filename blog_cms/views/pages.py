"""
Server-rendered pages.
"""
from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.db.models import Count, Prefetch
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect
from django.views import View
from django.views.generic import CreateView, DetailView, ListView, TemplateView, UpdateView

from ..conf import blog_settings
from ..forms import CommentForm, PostPageForm
from ..models import AboutPage, Bookmark, Category, Comment, Like, Post, Tag, is_admin
from .dashboard import dashboard_stats
from .taxonomy import published_post_count


class PostListView(ListView):
    """List published posts with pagination."""

    model = Post
    template_name = "blog_cms/post_list.html"
    context_object_name = "posts"
    paginate_by = blog_settings.POSTS_PER_PAGE

    def get_queryset(self):
        return (
            Post.objects.published()
            .with_counts()
            .select_related("author__profile", "category")
            .prefetch_related("tags")
        )

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["categories"] = Category.objects.annotate(
            published_posts=published_post_count()
        )
        return context


class PostDetailView(DetailView):
    """Display a single post with its comment threads."""

    model = Post
    template_name = "blog_cms/post_detail.html"
    context_object_name = "post"

    def get_object(self, queryset=None):
        obj = get_object_or_404(
            Post.objects.with_counts().select_related("author__profile", "category"),
            slug=self.kwargs["slug"],
        )

        # Drafts are only visible to their author and admins
        if not obj.can_view(self.request.user):
            raise Http404("Post not found")

        obj.increment_view_count()
        return obj

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        replies = Comment.objects.select_related("author__profile").order_by("created_at")
        context["comments"] = (
            self.object.comments.filter(parent=None)
            .select_related("author__profile")
            .prefetch_related(Prefetch("replies", queryset=replies))
            .order_by("-created_at")
        )
        context["related_posts"] = self._get_related_posts()

        user = self.request.user
        context["is_liked"] = Like.exists_for(self.object.pk, user)
        context["is_bookmarked"] = Bookmark.exists_for(self.object.pk, user)
        context["can_edit"] = self.object.can_edit(user)
        return context

    def _get_related_posts(self):
        """Get published posts sharing the category, else a tag."""
        post = self.object
        related = Post.objects.published().exclude(pk=post.pk)

        if post.category_id:
            related = related.filter(category_id=post.category_id)
        elif post.tags.exists():
            related = related.filter(tags__in=post.tags.all()).distinct()
        else:
            return Post.objects.none()

        return related[:blog_settings.RELATED_POSTS]


class PostCreateView(LoginRequiredMixin, UserPassesTestMixin, CreateView):
    """Write a new post. Only admins create posts."""

    model = Post
    form_class = PostPageForm
    template_name = "blog_cms/post_form.html"

    def test_func(self):
        return is_admin(self.request.user)

    def form_valid(self, form):
        form.instance.author = self.request.user
        return super().form_valid(form)


class PostUpdateView(LoginRequiredMixin, UpdateView):
    """Edit an existing post."""

    model = Post
    form_class = PostPageForm
    template_name = "blog_cms/post_form.html"

    def get_queryset(self):
        if is_admin(self.request.user):
            return Post.objects.all()
        return Post.objects.filter(author=self.request.user)


def get_visible_post(request, slug):
    post = get_object_or_404(Post, slug=slug)
    if not post.can_view(request.user):
        raise Http404("Post not found")
    return post


class CommentCreateView(LoginRequiredMixin, View):
    """Add a comment or reply from the post page."""

    def post(self, request, slug):
        post = get_visible_post(request, slug)

        form = CommentForm(request.POST)
        if not form.is_valid():
            for errors in form.errors.values():
                messages.error(request, errors[0])
            return redirect(post.get_absolute_url())

        parent = None
        parent_id = form.cleaned_data["parent_id"]
        if parent_id is not None:
            parent = get_object_or_404(Comment, pk=parent_id, post=post)

        Comment.objects.create(
            post=post,
            author=request.user,
            parent=parent,
            content=form.cleaned_data["content"],
        )
        return redirect(post.get_absolute_url())


class PostMarkToggleView(LoginRequiredMixin, View):
    """Toggle the user's like or bookmark on a post."""

    model = None

    def post(self, request, slug):
        post = get_visible_post(request, slug)
        if not self.model.remove(post.pk, request.user):
            self.model.add(post, request.user)
        return redirect(post.get_absolute_url())


class CategoryListView(ListView):
    template_name = "blog_cms/category_list.html"
    context_object_name = "categories"

    def get_queryset(self):
        return Category.objects.annotate(published_posts=published_post_count())


class CategoryPostListView(PostListView):
    """List posts in a specific category."""

    def get_queryset(self):
        self.category = get_object_or_404(Category, slug=self.kwargs["slug"])
        return super().get_queryset().filter(category=self.category)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["category"] = self.category
        return context


class TagPostListView(PostListView):
    """List posts with a specific tag."""

    def get_queryset(self):
        self.tag = get_object_or_404(Tag, slug=self.kwargs["slug"])
        return super().get_queryset().filter(tags=self.tag)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["tag"] = self.tag
        return context


class AboutView(TemplateView):
    template_name = "blog_cms/about.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        about = AboutPage.current()
        if about is None:
            raise Http404("About page not set up")
        context["about"] = about
        return context


class MyPostsView(LoginRequiredMixin, TemplateView):
    """The signed-in user's posts, drafts included, and bookmarks."""

    template_name = "blog_cms/my_posts.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        user = self.request.user
        context["posts"] = (
            Post.objects.filter(author=user)
            .with_counts()
            .select_related("category")
            .order_by("-created_at")
        )
        context["bookmarks"] = (
            Post.objects.published()
            .filter(bookmarks__user=user)
            .select_related("author__profile")
            .annotate(comment_total=Count("comments", distinct=True))
            .order_by("-bookmarks__created_at")
        )
        return context


class DashboardView(LoginRequiredMixin, UserPassesTestMixin, TemplateView):
    template_name = "blog_cms/dashboard.html"

    def test_func(self):
        return is_admin(self.request.user)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["stats"] = dashboard_stats()
        return context
