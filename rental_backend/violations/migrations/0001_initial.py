# violations/migrations/0001_initial.py

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="RentalViolation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "violation_type",
                    models.CharField(
                        choices=[
                            ("damaged", "Damaged"),
                            ("late_return", "Late return"),
                            ("not_returned", "Not returned"),
                        ],
                        max_length=32,
                    ),
                ),
                ("description", models.TextField()),
                ("damage_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("penalty_percentage", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("penalty_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Awaiting customer response"),
                            ("customer_accepted", "Accepted by customer"),
                            ("customer_rejected", "Rejected by customer"),
                            ("escalated", "Escalated to admin"),
                            ("resolved", "Resolved by admin"),
                        ],
                        default="pending",
                        max_length=32,
                    ),
                ),
                ("customer_notes", models.TextField(blank=True, default="")),
                ("customer_response_at", models.DateTimeField(blank=True, null=True)),
                ("customer_escalation_reason", models.TextField(blank=True, default="")),
                ("provider_response_to_customer", models.TextField(blank=True, default="")),
                ("provider_response_at", models.DateTimeField(blank=True, null=True)),
                ("provider_escalation_reason", models.TextField(blank=True, default="")),
                ("escalated_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="violations",
                        to="orders.orderitem",
                    ),
                ),
                (
                    "provider",
                    models.ForeignKey(
                        help_text="Provider who raised the claim (case owner).",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reported_violations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status"], name="violation_status_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status__in", ("pending", "customer_rejected", "escalated"))),
                        fields=("order_item",),
                        name="uniq_open_violation_per_order_item",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("penalty_amount__gte", 0)),
                        name="violation_penalty_amount_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("penalty_percentage__gte", 0), ("penalty_percentage__lte", 100)),
                        name="violation_penalty_percentage_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ViolationEvidence",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("file_url", models.URLField(max_length=500)),
                (
                    "file_type",
                    models.CharField(choices=[("image", "Image"), ("video", "Video")], max_length=16),
                ),
                (
                    "uploaded_by",
                    models.CharField(choices=[("provider", "Provider"), ("customer", "Customer")], max_length=16),
                ),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "violation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="evidence",
                        to="violations.rentalviolation",
                    ),
                ),
                (
                    "uploaded_by_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="violation_evidence",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["uploaded_at"],
            },
        ),
    ]
