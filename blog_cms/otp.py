"""
Email one-time codes for signup, signin and password reset.

The flow is three steps: issue_code() stores a fresh code and emails it,
the user types it back, and consume_code() checks it is still valid and
deletes it.
"""
import logging
import secrets
from datetime import timedelta

from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone

from .conf import blog_settings
from .models import VerificationToken

logger = logging.getLogger(__name__)


class OTPDeliveryError(Exception):
    """The code could not be emailed."""


def generate_code(length=None):
    """Return a random numeric code without a leading zero."""
    length = length or blog_settings.OTP_LENGTH
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def send_code_email(email, code, purpose):
    """Email code to the address; subject and copy depend on purpose."""
    subject = blog_settings.OTP_SUBJECTS.get(purpose, "Verification Code")
    context = {
        "subject": subject,
        "code": code,
        "expiry_minutes": blog_settings.OTP_EXPIRY_MINUTES,
    }
    text_body = render_to_string("blog_cms/email/otp.txt", context)
    html_body = render_to_string("blog_cms/email/otp.html", context)

    message = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=blog_settings.email_from,
        to=[email],
    )
    message.attach_alternative(html_body, "text/html")
    message.send(fail_silently=False)


def issue_code(email, purpose):
    """
    Replace any pending code for email with a new one and send it.

    Returns:
        The VerificationToken that was emailed.

    Raises:
        OTPDeliveryError: if sending failed. The new token is removed so
        an undelivered code can never be redeemed.
    """
    expires_at = timezone.now() + timedelta(minutes=blog_settings.OTP_EXPIRY_MINUTES)

    with transaction.atomic():
        VerificationToken.objects.filter(identifier=email).delete()
        token = VerificationToken.objects.create(
            identifier=email,
            token=generate_code(),
            purpose=purpose,
            expires_at=expires_at,
        )

    try:
        send_code_email(email, token.token, purpose)
    except Exception as exc:
        logger.exception("Failed to email %s code to %s", purpose, email)
        token.delete()
        raise OTPDeliveryError(str(exc)) from exc

    logger.info("Issued %s code for %s, expires %s", purpose, email, expires_at.isoformat())
    return token


def find_active_code(email, code):
    """Return the unexpired token matching email and code, or None."""
    return VerificationToken.objects.active().filter(identifier=email, token=code).first()


def consume_code(token):
    """Delete a token once it has been used."""
    VerificationToken.objects.filter(pk=token.pk).delete()


def purge_expired():
    """Delete expired tokens. Returns how many were removed."""
    deleted, _ = VerificationToken.objects.expired().delete()
    return deleted
