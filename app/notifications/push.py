"""
Push delivery to devices.

A PushSender delivers one message to one device token and reports whether
it went through. Senders are called concurrently from the push worker pool,
so they must not keep per-call state on the instance.

Senders:
    LoggingPushSender: Logs the message instead of sending it (development)
    FcmPushSender: Firebase Cloud Messaging HTTP v1 API

Configuration:
    NOTIFICATIONS_PUSH_SENDER: Dotted path of the sender class
    FCM_PROJECT_ID: Firebase project id
    FCM_CREDENTIALS_FILE: Service account JSON used to mint OAuth2 access tokens
    FCM_TIMEOUT_SECONDS: Per-request timeout
    FCM_CIRCUIT_FAILURE_THRESHOLD / FCM_CIRCUIT_RECOVERY_TIMEOUT: Breaker tuning
"""

from __future__ import annotations

import json
import logging
import threading
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import google.auth.exceptions
import requests
from django.conf import settings
from django.utils.module_loading import import_string
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from core.circuit_breaker import CircuitBreaker
from notifications.exceptions import PushDeliveryError

if TYPE_CHECKING:
    from typing import Any

    from google.auth.credentials import Credentials

logger = logging.getLogger(__name__)

FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"
FCM_SCOPES = ["https://www.googleapis.com/auth/firebase.messaging"]

# Credentials are shared by all pool threads; only one may refresh at a time
_refresh_lock = threading.Lock()


@lru_cache(maxsize=None)
def get_fcm_credentials(path: str) -> Credentials:
    """Load service account credentials once per process."""
    return service_account.Credentials.from_service_account_file(path, scopes=FCM_SCOPES)


@runtime_checkable
class PushSender(Protocol):
    def send(
        self,
        token: str,
        title: str,
        body: str,
        kind: str,
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """Deliver one message to one device. False or an exception means failure."""
        ...


class LoggingPushSender:
    """Sender that only logs. Always succeeds."""

    def send(self, token, title, body, kind, extra=None) -> bool:
        logger.info(f"[push:{kind}] to {token[:8]}...: {title} | {body}")
        return True


class FcmPushSender:
    """
    Sender for the FCM HTTP v1 API.

    Access tokens come from service account credentials and are refreshed
    shortly before they expire. Every request goes through a shared "fcm"
    circuit breaker, so while FCM is down sends fail immediately with
    CircuitOpenError.
    """

    def __init__(
        self,
        project_id: str | None = None,
        credentials: Credentials | None = None,
        timeout: float | None = None,
        circuit: CircuitBreaker | None = None,
    ):
        self.credentials = credentials or get_fcm_credentials(settings.FCM_CREDENTIALS_FILE)
        # Service account files name their project
        self.project_id = (
            project_id or settings.FCM_PROJECT_ID or getattr(self.credentials, "project_id", None)
        )
        self.timeout = timeout or settings.FCM_TIMEOUT_SECONDS
        self.circuit = circuit or CircuitBreaker(
            "fcm",
            failure_threshold=settings.FCM_CIRCUIT_FAILURE_THRESHOLD,
            recovery_timeout=settings.FCM_CIRCUIT_RECOVERY_TIMEOUT,
        )

    def access_token(self) -> str:
        """Current bearer token, refreshed first if missing or about to expire."""
        with _refresh_lock:
            if not self.credentials.valid:
                self.credentials.refresh(Request())
            return self.credentials.token

    @property
    def url(self) -> str:
        return FCM_SEND_URL.format(project_id=self.project_id)

    def build_payload(self, token, title, body, kind, extra=None) -> dict:
        # FCM data values must be strings
        data = {"type": str(kind)}
        for key, value in (extra or {}).items():
            if value is not None:
                data[key] = str(value)
        # Clients that read one structured entry get the same map as JSON
        data["payload"] = json.dumps(data, ensure_ascii=False)
        return {
            "message": {
                "token": token,
                "notification": {"title": title, "body": body},
                "data": data,
            }
        }

    def send(self, token, title, body, kind, extra=None) -> bool:
        """
        Send one message.

        Raises:
            PushDeliveryError: Transport error or non-2xx response
            CircuitOpenError: FCM circuit is open
        """
        payload = self.build_payload(token, title, body, kind, extra)

        with self.circuit.call():
            try:
                headers = {
                    "Authorization": f"Bearer {self.access_token()}",
                    "Content-Type": "application/json; UTF-8",
                }
                response = requests.post(
                    self.url, json=payload, headers=headers, timeout=self.timeout
                )
            except (requests.RequestException, google.auth.exceptions.GoogleAuthError) as e:
                raise PushDeliveryError(
                    "FCM request failed",
                    details={"token": token[:8], "original_error": str(e)},
                ) from e

            if not response.ok:
                raise PushDeliveryError(
                    f"FCM responded with {response.status_code}",
                    details={"token": token[:8], "response": response.text[:500]},
                )

        logger.debug(f"FCM accepted {kind} push for {token[:8]}...")
        return True


def get_push_sender() -> PushSender:
    """Instantiate the configured push sender."""
    return import_string(settings.NOTIFICATIONS_PUSH_SENDER)()
