# violations/serializers/__init__.py

from .command import (
    AddEvidenceSerializer,
    CreateViolationsSerializer,
    CustomerRespondSerializer,
    EscalateSerializer,
    EvidenceInputSerializer,
    ProviderResponseSerializer,
    ViolationClaimSerializer,
    ViolationPatchSerializer,
)
from .read import (
    ViolationEvidenceSerializer,
    ViolationSerializer,
    ViolationWithItemSerializer,
)

__all__ = [
    "AddEvidenceSerializer",
    "CreateViolationsSerializer",
    "CustomerRespondSerializer",
    "EscalateSerializer",
    "EvidenceInputSerializer",
    "ProviderResponseSerializer",
    "ViolationClaimSerializer",
    "ViolationPatchSerializer",
    "ViolationEvidenceSerializer",
    "ViolationSerializer",
    "ViolationWithItemSerializer",
]
