import os

from django.core.management.base import BaseCommand, CommandError

from clinic.models import User

DEFAULT_USERS = [
    ("admin", User.ROLE_ADMIN),
    ("doctor1", User.ROLE_DOCTOR),
    ("nurse1", User.ROLE_NURSE),
    ("lab1", User.ROLE_LAB_STAFF),
    ("reception1", User.ROLE_RECEPTIONIST),
]


class Command(BaseCommand):
    help = "Ensure one login per role exists (idempotent).  Password from --password or DEFAULT_USER_PASSWORD."

    def add_arguments(self, parser):
        parser.add_argument("--password", default=os.getenv("DEFAULT_USER_PASSWORD"))
        parser.add_argument("--reset", action="store_true", help="also reset passwords of existing users")

    def handle(self, *args, **opts):
        password = opts["password"]
        if not password or len(password) < 8:
            raise CommandError("a password of at least 8 characters is required")
        for username, role in DEFAULT_USERS:
            u = User.objects.filter(username=username).first()
            if u is None:
                u = User(username=username, role=role, is_active=True,
                         is_staff=role == User.ROLE_ADMIN, is_superuser=role == User.ROLE_ADMIN)
                u.set_password(password)
                u.save()
                self.stdout.write(self.style.SUCCESS(f"created: {username} ({role})"))
                continue
            u.role = role
            u.is_active = True
            if opts["reset"]:
                u.set_password(password)
            u.save()
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All default users ensured."))
