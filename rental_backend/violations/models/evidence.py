# violations/models/evidence.py

"""
VIOLATION EVIDENCE (APPEND-ONLY)

Pre-uploaded files (images or videos) attached to a violation by either
party. File storage is external: only the URL is kept.

Created once. Never updated. Never deleted.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from .violation import RentalViolation

User = settings.AUTH_USER_MODEL


class ViolationEvidence(models.Model):
    FILE_IMAGE = "image"
    FILE_VIDEO = "video"

    FILE_TYPE_CHOICES = [
        (FILE_IMAGE, "Image"),
        (FILE_VIDEO, "Video"),
    ]

    UPLOADER_PROVIDER = "provider"
    UPLOADER_CUSTOMER = "customer"

    UPLOADER_CHOICES = [
        (UPLOADER_PROVIDER, "Provider"),
        (UPLOADER_CUSTOMER, "Customer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    violation = models.ForeignKey(
        RentalViolation,
        on_delete=models.CASCADE,
        related_name="evidence",
    )

    file_url = models.URLField(max_length=500)
    file_type = models.CharField(max_length=16, choices=FILE_TYPE_CHOICES)

    uploaded_by = models.CharField(max_length=16, choices=UPLOADER_CHOICES)
    uploaded_by_user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="violation_evidence",
    )

    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["uploaded_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("ViolationEvidence records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("ViolationEvidence records cannot be deleted")

    def __str__(self):
        return f"{self.uploaded_by} {self.file_type} | {self.violation_id}"
