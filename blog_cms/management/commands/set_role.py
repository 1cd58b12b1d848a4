"""
Change a user's blog role.

    python manage.py set_role alice@example.com ADMIN
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from blog_cms.models import Profile, get_profile


class Command(BaseCommand):
    help = "Set the blog role (USER or ADMIN) of the user with the given email."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("role", choices=[Profile.USER, Profile.ADMIN])

    def handle(self, *args, **options):
        User = get_user_model()
        user = User.objects.filter(email__iexact=options["email"]).first()
        if user is None:
            raise CommandError(f"No user with email {options['email']}")

        profile = get_profile(user)
        previous = profile.role
        profile.role = options["role"]
        profile.save(update_fields=["role", "updated_at"])

        self.stdout.write(self.style.SUCCESS(
            f"{user.email}: {previous} -> {profile.role}"
        ))
