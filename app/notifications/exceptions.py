"""
Notification engine exceptions.

Exception Hierarchy:
    ExternalServiceError (core)
    ├── DirectoryUnavailableError - Participant/device/preference lookup failed
    └── PushDeliveryError - Push provider rejected or failed a send

    ImproperlyConfigured (django)
    └── TemplateConfigurationError - Locale bundles incomplete at startup
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from core.exceptions import ExternalServiceError


class DirectoryUnavailableError(ExternalServiceError):
    """
    Raised when the recipient directory cannot answer a query.

    Distinct from a deny: the guard never turns this into False.
    """

    default_error_code: str = "DIRECTORY_UNAVAILABLE"


class PushDeliveryError(ExternalServiceError):
    """Raised by push senders when a single device delivery fails."""

    default_error_code: str = "PUSH_DELIVERY_FAILED"


class TemplateConfigurationError(ImproperlyConfigured):
    """Raised at startup when a locale bundle is missing or incomplete."""
