"""
URL configuration for the retail POS platform.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.core.urls")),
    path("", include("apps.inventory.urls")),
    path("", include("apps.crm.urls")),
    path("", include("apps.delivery.urls")),
    path("", include("apps.sales.urls")),
    path("", include("apps.orders.urls")),
    path("", include("apps.finance.urls")),
    path("", include("apps.reporting.urls")),
    path("", include("apps.notifications.urls")),
    path("", include("django_prometheus.urls")),  # Prometheus metrics endpoint at /metrics
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
