# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
# A provider may also rent items from other providers, so "customer"
# describes the role on an order, not only the account role.
ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_PROVIDER = "provider"
ROLE_CUSTOMER = "customer"

BACK_OFFICE_ROLES = {
    ROLE_ADMIN,
    ROLE_STAFF,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_VIOLATION_REPORT = "violations.report"        # create / revise / edit claims
CAP_VIOLATION_RESPOND = "violations.respond"      # accept / reject a claim
CAP_VIOLATION_ESCALATE = "violations.escalate"
CAP_VIOLATION_VIEW_ALL = "violations.view_all"

CAP_DISPUTE_RESOLVE = "disputes.resolve"
CAP_ORDER_RECONCILE = "orders.reconcile"          # sync / manual resolve of orders

CAP_REFUND_VIEW_ALL = "refunds.view_all"
CAP_REFUND_PROCESS = "refunds.process"
CAP_REFUND_VIEW_OWN = "refunds.view_own"
CAP_REFUND_REOPEN = "refunds.reopen"

ALL_CAPABILITIES = {
    CAP_VIOLATION_REPORT,
    CAP_VIOLATION_RESPOND,
    CAP_VIOLATION_ESCALATE,
    CAP_VIOLATION_VIEW_ALL,
    CAP_DISPUTE_RESOLVE,
    CAP_ORDER_RECONCILE,
    CAP_REFUND_VIEW_ALL,
    CAP_REFUND_PROCESS,
    CAP_REFUND_VIEW_OWN,
    CAP_REFUND_REOPEN,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_STAFF: {
        CAP_VIOLATION_VIEW_ALL,
        CAP_ORDER_RECONCILE,
        CAP_REFUND_VIEW_ALL,
    },
    ROLE_PROVIDER: {
        CAP_VIOLATION_REPORT,
        CAP_VIOLATION_ESCALATE,
        # providers rent from other providers too
        CAP_VIOLATION_RESPOND,
        CAP_REFUND_VIEW_OWN,
        CAP_REFUND_REOPEN,
    },
    ROLE_CUSTOMER: {
        CAP_VIOLATION_RESPOND,
        CAP_VIOLATION_ESCALATE,
        CAP_REFUND_VIEW_OWN,
        CAP_REFUND_REOPEN,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return capability in capabilities_for(user)


def is_back_office(user) -> bool:
    return get_user_role(user) in BACK_OFFICE_ROLES


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_REFUND_PROCESS
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_REFUND_VIEW_ALL, CAP_REFUND_VIEW_OWN}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = capabilities_for(user)
        return any(cap in caps for cap in set(required))
