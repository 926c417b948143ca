# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product_name", "product_id", "deposit_per_unit", "quantity")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_code", "customer", "provider", "status", "total_amount", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "customer__email", "provider__email")
    inlines = [OrderItemInline]
