# violations/admin.py

from django.contrib import admin

from violations.models import RentalViolation, ViolationEvidence


class ViolationEvidenceInline(admin.TabularInline):
    model = ViolationEvidence
    extra = 0
    can_delete = False
    readonly_fields = ("file_url", "file_type", "uploaded_by", "uploaded_by_user", "uploaded_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(RentalViolation)
class RentalViolationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "violation_type",
        "status",
        "penalty_amount",
        "provider",
        "created_at",
    )
    list_filter = ("status", "violation_type")
    search_fields = ("id", "provider__email", "order_item__product_name")
    readonly_fields = ("status", "penalty_amount", "penalty_percentage")
    inlines = [ViolationEvidenceInline]
