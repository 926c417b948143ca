# orders/api/urls.py

from django.urls import path

from orders.views import ConfirmCleanReturnView

app_name = "orders"

urlpatterns = [
    path(
        "<uuid:order_id>/confirm-clean-return/",
        ConfirmCleanReturnView.as_view(),
        name="confirm-clean-return",
    ),
]
