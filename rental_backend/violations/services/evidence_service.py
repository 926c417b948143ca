# violations/services/evidence_service.py

"""
VIOLATION EVIDENCE

Evidence files are uploaded elsewhere; this engine receives their URLs.
Each entry is validated against the accepted image/video extensions and
stored append-only.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from urllib.parse import urlparse

from django.conf import settings

from common.exceptions import ValidationError
from violations.models import RentalViolation, ViolationEvidence

logger = logging.getLogger("violations")

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "bmp"}
VIDEO_EXTENSIONS = {"mp4", "mov", "avi", "mkv", "webm", "flv", "wmv"}

EXTENSIONS_BY_FILE_TYPE = {
    ViolationEvidence.FILE_IMAGE: IMAGE_EXTENSIONS,
    ViolationEvidence.FILE_VIDEO: VIDEO_EXTENSIONS,
}


@dataclass(frozen=True)
class EvidenceInput:
    file_url: str
    file_type: str


def _extension(url: str) -> str:
    path = urlparse(url).path
    return posixpath.splitext(path)[1].lstrip(".").lower()


def normalize_evidence(entries) -> list[EvidenceInput]:
    """
    Accepts dicts ({"file_url", "file_type"}) or EvidenceInput values.
    """
    normalized = []
    for entry in entries or []:
        if isinstance(entry, EvidenceInput):
            url, file_type = entry.file_url, entry.file_type
        else:
            url = (entry.get("file_url") or "").strip()
            file_type = (entry.get("file_type") or "").strip().lower()

        if not url:
            raise ValidationError("Evidence file_url is required")

        allowed = EXTENSIONS_BY_FILE_TYPE.get(file_type)
        if allowed is None:
            raise ValidationError(f"Unsupported evidence file_type '{file_type}'")

        ext = _extension(url)
        if ext not in allowed:
            raise ValidationError(
                f"'{ext or url}' is not an accepted {file_type} format "
                f"({', '.join(sorted(allowed))})"
            )

        normalized.append(EvidenceInput(file_url=url, file_type=file_type))
    return normalized


def attach_evidence(
    *,
    violation: RentalViolation,
    entries: list[EvidenceInput],
    uploaded_by: str,
    user=None,
) -> list[ViolationEvidence]:
    limit = settings.EVIDENCE_MAX_FILES_PER_CASE
    existing = violation.evidence.count()
    if existing + len(entries) > limit:
        raise ValidationError(
            f"A violation can hold at most {limit} evidence files "
            f"({existing} already attached)"
        )

    created = [
        ViolationEvidence.objects.create(
            violation=violation,
            file_url=entry.file_url,
            file_type=entry.file_type,
            uploaded_by=uploaded_by,
            uploaded_by_user=user,
        )
        for entry in entries
    ]

    if created:
        logger.info(
            "Violation evidence attached",
            extra={
                "violation_id": str(violation.id),
                "uploaded_by": uploaded_by,
                "count": len(created),
            },
        )
    return created
