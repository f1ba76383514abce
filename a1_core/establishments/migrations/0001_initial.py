import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Establishment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("code", models.SlugField(max_length=64, unique=True)),
                (
                    "establishment_type",
                    models.CharField(
                        choices=[("ubs", "Clinic (UBS)"), ("upa", "Urgent care unit (UPA)"), ("hospital", "Hospital")],
                        db_index=True,
                        default="ubs",
                        max_length=16,
                    ),
                ),
                ("cnes", models.CharField(blank=True, default="", max_length=16)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("city", models.CharField(blank=True, default="", max_length=128)),
                ("state", models.CharField(blank=True, default="", max_length=2)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("deactivated_at", models.DateTimeField(blank=True, null=True)),
                ("deactivation_reason", models.CharField(blank=True, default="", max_length=255)),
            ],
            options={
                "db_table": "establishments_establishment",
                "indexes": [
                    models.Index(fields=["establishment_type", "is_active"], name="est_type_active_idx"),
                ],
            },
        ),
    ]
