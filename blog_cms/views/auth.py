"""
Email one-time-code authentication endpoints.

A successful verification logs the user in through Django's session
framework, the same as a password sign-in.
"""
from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse

from .. import accounts
from ..accounts import find_user
from ..forms import SendOTPForm, SignInForm, VerifyOTPForm
from ..models import get_profile
from ..otp import OTPDeliveryError, find_active_code, issue_code
from ..serializers import user_summary
from .base import ApiView, json_error, validation_error


class SendOTPView(ApiView):
    def post(self, request):
        form = SendOTPForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)
        email = form.cleaned_data["email"].lower()
        purpose = form.cleaned_data["type"]

        user = find_user(email)
        if purpose == "signup" and user is not None:
            return json_error("User already exists", 400)
        if purpose != "signup" and user is None:
            return json_error("No account found", 404)

        try:
            token = issue_code(email, purpose)
        except OTPDeliveryError:
            return json_error("Failed to send verification code", 500)

        return JsonResponse({
            "message": "Verification code sent",
            "expires_at": token.expires_at.isoformat(),
        })


class VerifyOTPView(ApiView):
    def post(self, request):
        form = VerifyOTPForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)
        data = form.cleaned_data
        email = data["email"].lower()

        token = find_active_code(email, data["otp"])
        if token is None:
            return json_error("Invalid or expired OTP", 400)

        handler = {
            "signup": self.sign_up,
            "signin": self.sign_in,
            "reset-password": self.reset_password,
        }[data["type"]]
        return handler(request, email, token, data)

    def sign_up(self, request, email, token, data):
        if not data["name"] or not data["password"]:
            return json_error("Name and password are required for signup", 400)
        try:
            user = accounts.create_account(email, data["name"], data["password"], token)
        except accounts.AccountExists:
            return json_error("User already exists", 400)

        login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        return JsonResponse(
            {"message": "Account created successfully", "user": user_summary(user)},
            status=201,
        )

    def sign_in(self, request, email, token, data):
        user = find_user(email)
        if user is None:
            return json_error("User not found", 404)

        accounts.confirm_sign_in(user, token)
        login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        return JsonResponse({"message": "Signed in successfully", "user": user_summary(user)})

    def reset_password(self, request, email, token, data):
        if not data["password"]:
            return json_error("Password is required for password reset", 400)
        user = find_user(email)
        if user is None:
            return json_error("User not found", 404)

        accounts.reset_password(user, data["password"], token)
        return JsonResponse({"message": "Password reset successfully"})


class SignInView(ApiView):
    def post(self, request):
        form = SignInForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)

        email = form.cleaned_data["email"].lower()
        existing = find_user(email)
        user = authenticate(
            request,
            username=existing.get_username() if existing else email,
            password=form.cleaned_data["password"],
        )
        if user is None:
            return json_error("Invalid email or password", 401)

        login(request, user)
        return JsonResponse({"message": "Signed in successfully", "user": user_summary(user)})


class SignOutView(ApiView):
    def post(self, request):
        logout(request)
        return JsonResponse({"message": "Signed out successfully"})


class SessionView(ApiView):
    def get(self, request):
        if not request.user.is_authenticated:
            return JsonResponse({"user": None})
        user = request.user
        return JsonResponse({
            "user": {
                **user_summary(user),
                "role": "ADMIN" if user.is_superuser else get_profile(user).role,
            },
        })
