"""
Category and tag API views.
"""
import logging

from django.db.models import Count, Q
from django.http import JsonResponse

from ..conf import blog_settings
from ..forms import CategoryForm, CategoryUpdateForm
from ..models import Category, Post, Tag, slugify_name
from ..serializers import category_to_dict, tag_to_dict
from .base import ApiView, check_access, json_error, paginate, query_flag, validation_error

logger = logging.getLogger(__name__)

CATEGORY_EXISTS = "Category with this name already exists"


def published_post_count():
    return Count(
        "posts",
        filter=Q(posts__status=Post.PUBLISHED, posts__published_at__isnull=False),
        distinct=True,
    )


def category_conflict(name, slug, exclude_pk=None):
    return (
        Category.objects.filter(Q(name=name) | Q(slug=slug))
        .exclude(pk=exclude_pk)
        .exists()
    )


class CategoryListCreateView(ApiView):
    def get(self, request):
        queryset = Category.objects.order_by("name")
        include_count = query_flag(request, "include_post_count")
        if include_count:
            queryset = queryset.annotate(published_posts=published_post_count())

        categories, pagination = paginate(
            request, queryset, blog_settings.CATEGORIES_PER_PAGE
        )
        return JsonResponse({
            "categories": [
                category_to_dict(
                    c, post_count=c.published_posts if include_count else None
                )
                for c in categories
            ],
            "pagination": pagination,
        })

    def post(self, request):
        denied = check_access(request, admin=True)
        if denied:
            return denied

        form = CategoryForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)

        name = form.cleaned_data["name"]
        slug = slugify_name(name, fallback="category")
        if category_conflict(name, slug):
            return json_error(CATEGORY_EXISTS, 409)

        category = Category.objects.create(
            name=name,
            slug=slug,
            description=form.cleaned_data["description"],
        )
        logger.info("Category %s created by user %s", category.slug, request.user.pk)
        return JsonResponse(
            {
                "message": "Category created successfully",
                "category": category_to_dict(category),
            },
            status=201,
        )


class CategoryDetailView(ApiView):
    def get(self, request, pk):
        category = (
            Category.objects.annotate(published_posts=published_post_count())
            .filter(pk=pk)
            .first()
        )
        if category is None:
            return json_error("Category not found", 404)
        return JsonResponse({
            "category": category_to_dict(category, post_count=category.published_posts),
        })

    def put(self, request, pk):
        denied = check_access(request, admin=True)
        if denied:
            return denied

        category = Category.objects.filter(pk=pk).first()
        if category is None:
            return json_error("Category not found", 404)

        form = CategoryUpdateForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)
        present = form.present_fields

        if "name" in present and form.cleaned_data["name"] != category.name:
            name = form.cleaned_data["name"]
            slug = slugify_name(name, fallback="category")
            if category_conflict(name, slug, exclude_pk=category.pk):
                return json_error(CATEGORY_EXISTS, 409)
            category.name = name
            category.slug = slug
        if "description" in present:
            category.description = form.cleaned_data["description"]
        category.save()

        return JsonResponse({
            "message": "Category updated successfully",
            "category": category_to_dict(category),
        })

    def delete(self, request, pk):
        denied = check_access(request, admin=True)
        if denied:
            return denied

        category = Category.objects.filter(pk=pk).first()
        if category is None:
            return json_error("Category not found", 404)
        if category.posts.exists():
            return json_error(
                "Cannot delete category with associated posts. "
                "Please reassign or delete the posts first.",
                400,
            )

        category.delete()
        logger.info("Category %s deleted by user %s", pk, request.user.pk)
        return JsonResponse({"message": "Category deleted successfully"})


class TagListCreateView(ApiView):
    def get(self, request):
        tags = Tag.objects.annotate(num_posts=Count("posts")).order_by("name")
        return JsonResponse({
            "tags": [tag_to_dict(tag, post_count=tag.num_posts) for tag in tags],
        })

    def post(self, request):
        denied = check_access(request, admin=True)
        if denied:
            return denied

        name = self.get_json().get("name")
        if not isinstance(name, str) or not name.strip():
            return json_error("Tag name is required", 400)
        name = name.strip()

        slug = slugify_name(name, fallback="tag")
        if Tag.objects.filter(Q(name=name) | Q(slug=slug)).exists():
            return json_error("Tag with this name already exists", 409)

        tag = Tag.objects.create(name=name, slug=slug)
        return JsonResponse(
            {"message": "Tag created successfully", "tag": tag_to_dict(tag)},
            status=201,
        )
