"""
Forms for the blog_cms API and HTML pages.

API views bind the decoded JSON dict as form data. Update forms make every
field optional and report which keys were actually sent through
``present_fields``. The page forms at the bottom back the server-rendered
account and editing views.
"""
from django import forms
from django.contrib.auth import authenticate
from django.core.exceptions import ValidationError
from django.db import transaction

from .accounts import find_user
from .conf import blog_settings
from .models import AboutPage, Post, Profile, Tag, VerificationToken


class StringListField(forms.Field):
    """A JSON array of strings."""

    default_error_messages = {
        "invalid": "Enter a list of strings.",
    }

    def to_python(self, value):
        if value in (None, ""):
            return []
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ValidationError(self.error_messages["invalid"], code="invalid")
        return list(value)


class StrictCharField(forms.CharField):
    """CharField that refuses non-string JSON values instead of coercing them."""

    def to_python(self, value):
        if value is not None and not isinstance(value, str):
            raise ValidationError(
                self.error_messages.get("invalid", "Must be a string."),
                code="invalid",
            )
        return super().to_python(value)


class PartialUpdateMixin:
    """
    Make every field optional for PATCH-like PUT requests.

    Fields listed in ``non_blank_fields`` may be omitted but not sent empty.
    """

    non_blank_fields = ()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False

    @property
    def present_fields(self):
        return [name for name in self.fields if name in self.data]

    def clean(self):
        cleaned_data = super().clean()
        for name in self.non_blank_fields:
            if name in self.data and not cleaned_data.get(name):
                self.add_error(name, f"{name.capitalize()} is required")
        return cleaned_data


class PostForm(forms.Form):
    title = StrictCharField(
        max_length=blog_settings.POST_TITLE_MAX_LENGTH,
        error_messages={
            "required": "Title is required",
            "max_length": "Title must be less than 200 characters",
        },
    )
    content = StrictCharField(
        strip=False,
        error_messages={"required": "Content is required"},
    )
    excerpt = StrictCharField(
        required=False,
        max_length=blog_settings.EXCERPT_MAX_LENGTH,
        error_messages={"max_length": "Excerpt must be less than 500 characters"},
    )
    category_id = forms.IntegerField(required=False)
    tags = StringListField(required=False)
    featured_image = StrictCharField(required=False, max_length=500)
    published = forms.BooleanField(required=False)


class PostUpdateForm(PartialUpdateMixin, PostForm):
    non_blank_fields = ("title", "content")

    published = forms.NullBooleanField(required=False)


class CommentForm(forms.Form):
    content = StrictCharField(
        max_length=blog_settings.COMMENT_MAX_LENGTH,
        error_messages={
            "required": "Comment cannot be empty",
            "max_length": "Comment must be less than 1000 characters",
        },
    )
    parent_id = forms.IntegerField(required=False)


class CategoryForm(forms.Form):
    name = StrictCharField(
        max_length=blog_settings.CATEGORY_NAME_MAX_LENGTH,
        error_messages={
            "required": "Category name is required",
            "max_length": "Category name must be less than 100 characters",
        },
    )
    description = StrictCharField(required=False)


class CategoryUpdateForm(PartialUpdateMixin, CategoryForm):
    non_blank_fields = ("name",)


class SendOTPForm(forms.Form):
    email = forms.EmailField(error_messages={"invalid": "Invalid email address"})
    type = forms.ChoiceField(choices=VerificationToken.PURPOSE_CHOICES)


class VerifyOTPForm(forms.Form):
    email = forms.EmailField(error_messages={"invalid": "Invalid email address"})
    otp = StrictCharField(
        min_length=blog_settings.OTP_LENGTH,
        max_length=blog_settings.OTP_LENGTH,
        error_messages={
            "min_length": "OTP must be 6 digits",
            "max_length": "OTP must be 6 digits",
        },
    )
    password = StrictCharField(
        required=False,
        strip=False,
        min_length=blog_settings.PASSWORD_MIN_LENGTH,
        error_messages={"min_length": "Password must be at least 8 characters"},
    )
    name = StrictCharField(
        required=False,
        min_length=blog_settings.NAME_MIN_LENGTH,
        max_length=100,
        error_messages={"min_length": "Name must be at least 2 characters"},
    )
    type = forms.ChoiceField(choices=VerificationToken.PURPOSE_CHOICES)


class SignInForm(forms.Form):
    email = forms.EmailField()
    password = StrictCharField(strip=False)


class ProfileForm(PartialUpdateMixin, forms.Form):
    name = StrictCharField(max_length=100, error_messages={"invalid": "Invalid name"})
    bio = StrictCharField(error_messages={"invalid": "Invalid bio"})
    website = StrictCharField(max_length=255, error_messages={"invalid": "Invalid website"})
    location = StrictCharField(max_length=255, error_messages={"invalid": "Invalid location"})
    image = StrictCharField(max_length=500, error_messages={"invalid": "Invalid image"})


class AboutPageForm(forms.ModelForm):
    class Meta:
        model = AboutPage
        fields = AboutPage.EDITABLE_FIELDS


class TrackForm(forms.Form):
    path = StrictCharField(max_length=500)
    referrer = StrictCharField(required=False, max_length=500)
    user_agent = StrictCharField(required=False)
    session_id = StrictCharField(required=False, max_length=100)
    user_id = forms.IntegerField(required=False)
    post_id = forms.IntegerField(required=False)


class SessionEndForm(forms.Form):
    session_id = StrictCharField(max_length=100)
    duration = forms.IntegerField(min_value=0)


# HTML page forms

class EmailCodeForm(forms.Form):
    """Ask for the email address a one-time code is sent to."""

    email = forms.EmailField(error_messages={"invalid": "Invalid email address"})

    def clean_email(self):
        email = self.cleaned_data["email"].lower()
        if find_user(email) is None:
            raise ValidationError("No account found")
        return email


class SignUpPageForm(EmailCodeForm):
    name = forms.CharField(
        min_length=blog_settings.NAME_MIN_LENGTH,
        max_length=100,
        error_messages={"min_length": "Name must be at least 2 characters"},
    )

    field_order = ["name", "email"]

    def clean_email(self):
        email = self.cleaned_data["email"].lower()
        if find_user(email) is not None:
            raise ValidationError("User already exists")
        return email


class VerifyCodePageForm(forms.Form):
    """
    The emailed code, plus a new password for signup and password reset.
    """

    code = forms.CharField(
        min_length=blog_settings.OTP_LENGTH,
        max_length=blog_settings.OTP_LENGTH,
        error_messages={
            "min_length": "OTP must be 6 digits",
            "max_length": "OTP must be 6 digits",
        },
    )
    password = forms.CharField(
        strip=False,
        min_length=blog_settings.PASSWORD_MIN_LENGTH,
        widget=forms.PasswordInput,
        error_messages={"min_length": "Password must be at least 8 characters"},
    )
    confirm_password = forms.CharField(strip=False, widget=forms.PasswordInput)

    def __init__(self, *args, purpose="signin", **kwargs):
        super().__init__(*args, **kwargs)
        self.purpose = purpose
        if purpose == "signin":
            del self.fields["password"]
            del self.fields["confirm_password"]

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get("password")
        if password and password != cleaned_data.get("confirm_password"):
            self.add_error("confirm_password", "Passwords do not match")
        return cleaned_data


class SignInPageForm(forms.Form):
    """Email and password sign-in, usable as a LoginView authentication_form."""

    email = forms.EmailField()
    password = forms.CharField(strip=False, widget=forms.PasswordInput)

    def __init__(self, request=None, *args, **kwargs):
        self.request = request
        self.user_cache = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        email = cleaned_data.get("email")
        password = cleaned_data.get("password")
        if email and password:
            existing = find_user(email)
            self.user_cache = authenticate(
                self.request,
                username=existing.get_username() if existing else email.lower(),
                password=password,
            )
            if self.user_cache is None:
                raise ValidationError("Invalid email or password", code="invalid_login")
        return cleaned_data

    def get_user(self):
        return self.user_cache


class PostPageForm(forms.ModelForm):
    """
    Create or edit a post from the write page.

    Tags are entered comma separated. Saving a new title derives a new
    slug, and publish state only changes when the checkbox does.
    """

    tag_names = forms.CharField(required=False, label="Tags", help_text="Comma separated")
    published = forms.BooleanField(required=False)

    class Meta:
        model = Post
        fields = ["title", "content", "excerpt", "cover_image", "category"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.initial["tag_names"] = ", ".join(t.name for t in self.instance.tags.all())
            self.initial["published"] = self.instance.is_published

    def clean_tag_names(self):
        names = self.cleaned_data["tag_names"].split(",")
        return [name.strip() for name in names if name.strip()]

    def save(self, commit=True):
        post = super().save(commit=False)
        if post.pk is None or "published" in self.changed_data:
            post.set_published(self.cleaned_data["published"])
        if post.pk is not None and "title" in self.changed_data:
            post.retitle(post.title)
        if commit:
            with transaction.atomic():
                post.save()
                post.tags.set(Tag.get_or_create_many(self.cleaned_data["tag_names"]))
        return post


class ProfilePageForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ["name", "bio", "website", "location", "image"]
