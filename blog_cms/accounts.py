"""
Account changes that complete a one-time-code verification.

Shared by the JSON API and the HTML pages. Each function consumes the
verified token in the same transaction as the change it authorises.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .models import Profile, get_profile
from .otp import consume_code

logger = logging.getLogger(__name__)

User = get_user_model()


class AccountExists(Exception):
    """An account already uses this email address."""


def find_user(email):
    return User.objects.filter(email__iexact=email).first()


def create_account(email, name, password, token):
    """
    Create a verified USER account for email.

    Raises:
        AccountExists: if the address is taken, including when a concurrent
        signup wins the race for the username.
    """
    if find_user(email) is not None:
        raise AccountExists(email)

    try:
        with transaction.atomic():
            user = User.objects.create_user(username=email, email=email, password=password)
            profile = get_profile(user)
            profile.name = name
            profile.role = Profile.USER
            profile.save(update_fields=["name", "role", "updated_at"])
            profile.mark_email_verified()
            consume_code(token)
    except IntegrityError as exc:
        raise AccountExists(email) from exc

    logger.info("User %s signed up", user.pk)
    return user


def confirm_sign_in(user, token):
    with transaction.atomic():
        get_profile(user).mark_email_verified()
        consume_code(token)


def reset_password(user, password, token):
    with transaction.atomic():
        user.set_password(password)
        user.save(update_fields=["password"])
        get_profile(user).mark_email_verified()
        consume_code(token)

    logger.info("User %s reset their password", user.pk)
