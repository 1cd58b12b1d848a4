"""
Server-rendered account pages: signup, sign-in, password reset and profile.

Code-based flows are two steps. The first page emails a code and stores
what it needs in the session; VerifyCodePageView finishes the flow.
"""
from django.contrib import messages
from django.contrib.auth import login
from django.contrib.auth.mixins import LoginRequiredMixin
from django.contrib.auth.views import LoginView
from django.contrib.messages.views import SuccessMessageMixin
from django.shortcuts import redirect
from django.urls import reverse_lazy
from django.views.generic import FormView, UpdateView

from .. import accounts
from ..forms import (
    EmailCodeForm,
    ProfilePageForm,
    SignInPageForm,
    SignUpPageForm,
    VerifyCodePageForm,
)
from ..models import get_profile
from ..otp import OTPDeliveryError, find_active_code, issue_code
from .users import user_stats

PENDING_SESSION_KEY = "blog_cms_pending_code"


class SendCodePageView(FormView):
    """Email a one-time code for ``purpose``, then continue on the verify page."""

    purpose = None
    form_class = EmailCodeForm
    template_name = "blog_cms/auth/send_code.html"
    title = ""

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["title"] = self.title
        return context

    def get_pending(self, form):
        return {"email": form.cleaned_data["email"], "purpose": self.purpose}

    def form_valid(self, form):
        try:
            issue_code(form.cleaned_data["email"], self.purpose)
        except OTPDeliveryError:
            form.add_error(None, "Failed to send verification code")
            return self.form_invalid(form)

        self.request.session[PENDING_SESSION_KEY] = self.get_pending(form)
        messages.info(self.request, "Verification code sent")
        return redirect("blog_cms:verify_code")


class SignUpPageView(SendCodePageView):
    purpose = "signup"
    form_class = SignUpPageForm
    title = "Create an account"

    def get_pending(self, form):
        pending = super().get_pending(form)
        pending["name"] = form.cleaned_data["name"]
        return pending


class SignInCodePageView(SendCodePageView):
    purpose = "signin"
    title = "Sign in with a code"


class ForgotPasswordPageView(SendCodePageView):
    purpose = "reset-password"
    title = "Reset your password"


class VerifyCodePageView(FormView):
    """Check the emailed code and complete the pending signup, sign-in or reset."""

    form_class = VerifyCodePageForm
    template_name = "blog_cms/auth/verify_code.html"

    def dispatch(self, request, *args, **kwargs):
        self.pending = request.session.get(PENDING_SESSION_KEY)
        if not self.pending:
            return redirect("blog_cms:signin")
        return super().dispatch(request, *args, **kwargs)

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["purpose"] = self.pending["purpose"]
        return kwargs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["email"] = self.pending["email"]
        context["purpose"] = self.pending["purpose"]
        return context

    def form_valid(self, form):
        email = self.pending["email"]
        token = find_active_code(email, form.cleaned_data["code"])
        if token is None:
            form.add_error("code", "Invalid or expired OTP")
            return self.form_invalid(form)

        purpose = self.pending["purpose"]
        if purpose == "signup":
            try:
                user = accounts.create_account(
                    email, self.pending["name"], form.cleaned_data["password"], token
                )
            except accounts.AccountExists:
                form.add_error(None, "User already exists")
                return self.form_invalid(form)
        else:
            user = accounts.find_user(email)
            if user is None:
                form.add_error(None, "User not found")
                return self.form_invalid(form)

        self.request.session.pop(PENDING_SESSION_KEY, None)

        if purpose == "reset-password":
            accounts.reset_password(user, form.cleaned_data["password"], token)
            messages.success(self.request, "Password reset successfully")
            return redirect("blog_cms:signin")

        if purpose == "signin":
            accounts.confirm_sign_in(user, token)
        login(self.request, user, backend="django.contrib.auth.backends.ModelBackend")
        messages.success(self.request, "Signed in successfully")
        return redirect("blog_cms:home")


class SignInPageView(LoginView):
    template_name = "blog_cms/auth/signin.html"
    authentication_form = SignInPageForm
    redirect_authenticated_user = True
    next_page = reverse_lazy("blog_cms:home")


class ProfileUpdateView(LoginRequiredMixin, SuccessMessageMixin, UpdateView):
    """Edit the signed-in user's profile and show their totals."""

    form_class = ProfilePageForm
    template_name = "blog_cms/profile_form.html"
    success_url = reverse_lazy("blog_cms:profile")
    success_message = "Profile updated successfully"

    def get_object(self, queryset=None):
        return get_profile(self.request.user)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["stats"] = user_stats(self.request.user)
        return context
