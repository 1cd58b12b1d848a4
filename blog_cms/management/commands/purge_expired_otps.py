"""
Delete verification codes that can no longer be redeemed.
"""
from django.core.management.base import BaseCommand

from blog_cms.otp import purge_expired


class Command(BaseCommand):
    help = "Delete expired one-time verification codes."

    def handle(self, *args, **options):
        deleted = purge_expired()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} expired codes"))
