# a1_core/iam/management/commands/create_profile_user.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from a1_core.audit.services import AuditService
from a1_core.establishments.models import Establishment
from a1_core.iam.models import UserProfile
from a1_core.iam.policy import default_access_policy
from a1_core.iam.profiles import PermissionToken, Profile


class Command(BaseCommand):
    help = "Create (or update) a user with an A1 profile. Idempotent; used to bootstrap the first system_master."

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("--password", required=True)
        parser.add_argument("--profile", default=Profile.SYSTEM_MASTER, choices=Profile.values)
        parser.add_argument("--establishment", default=None, help="Establishment code (required for restricted profiles).")
        parser.add_argument("--email", default="")
        parser.add_argument("--full-name", default="")

    @transaction.atomic
    def handle(self, *args, **options):
        profile = options["profile"]
        establishment = None

        if options["establishment"]:
            establishment = Establishment.objects.filter(code=options["establishment"]).first()
            if establishment is None:
                raise CommandError(f"Establishment '{options['establishment']}' not found.")
        elif not default_access_policy().role_map.grants(profile, PermissionToken.VIEW_ALL_ESTABLISHMENTS):
            raise CommandError(f"Profile '{profile}' requires --establishment.")

        User = get_user_model()
        user, user_created = User.objects.get_or_create(
            username=options["username"],
            defaults={"email": options["email"]},
        )
        user.set_password(options["password"])
        user.is_active = True
        user.save()

        up, _ = UserProfile.objects.update_or_create(
            user=user,
            defaults={
                "profile": profile,
                "establishment": establishment,
                "full_name": options["full_name"],
                "is_active": True,
                "deactivated_at": None,
            },
        )

        AuditService.log(
            event_code="user.created" if user_created else "user.updated",
            entity_type="UserProfile",
            entity_id=up.id,
            establishment_id=up.establishment_id,
            actor_user_id=None,
            metadata={"username": user.username, "profile": profile, "source": "create_profile_user"},
        )

        verb = "Created" if user_created else "Updated"
        self.stdout.write(self.style.SUCCESS(f"{verb} user '{user.username}' with profile {profile}."))
