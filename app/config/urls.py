"""
URL configuration for the Django application.

URL Structure:
    /admin/    - Django admin interface (notifications, devices, preferences)

The notification engine itself exposes no HTTP endpoints; request handlers
live in the services that own projects and transactions.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
