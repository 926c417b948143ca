# disputes/migrations/0001_initial.py

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("violations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IssueResolution",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "resolution_type",
                    models.CharField(
                        choices=[
                            ("uphold_claim", "Claim upheld"),
                            ("reject_claim", "Claim rejected"),
                            ("compromise", "Compromise"),
                        ],
                        max_length=32,
                    ),
                ),
                ("customer_fine_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "provider_compensation_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12),
                ),
                ("reason", models.TextField()),
                (
                    "resolution_status",
                    models.CharField(choices=[("completed", "Completed")], default="completed", max_length=16),
                ),
                ("processed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "violation",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="resolution",
                        to="violations.rentalviolation",
                    ),
                ),
                (
                    "processed_by_admin",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="issue_resolutions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-processed_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("customer_fine_amount__gte", 0), ("provider_compensation_amount__gte", 0)),
                        name="issue_resolution_amounts_non_negative",
                    ),
                ],
            },
        ),
    ]
