# disputes/admin.py

from django.contrib import admin

from disputes.models import IssueResolution


@admin.register(IssueResolution)
class IssueResolutionAdmin(admin.ModelAdmin):
    """
    Read-only: rulings are immutable and created through the API only.
    """

    list_display = (
        "violation",
        "resolution_type",
        "customer_fine_amount",
        "provider_compensation_amount",
        "processed_by_admin",
        "processed_at",
    )
    list_filter = ("resolution_type", "resolution_status")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
