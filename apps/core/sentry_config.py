"""
Sentry initialization with data scrubbing.

Customer phone numbers, card amounts and auth tokens flow through POS requests,
so events are scrubbed before they leave the process.
"""

import re
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration

SENSITIVE_KEYS = {
    "password",
    "secret",
    "token",
    "authorization",
    "cookie",
    "csrf",
    "session",
}

# Local mobile numbers (e.g. 01001234567) and generic 10+ digit runs
PHONE_PATTERN = re.compile(r"\b0?1\d{9}\b|\b\d{10,}\b")


def scrub_sensitive_data(data: Any) -> Any:
    """Recursively mask sensitive keys and phone numbers."""
    if isinstance(data, dict):
        return {
            key: "[REDACTED]" if _is_sensitive_key(key) else scrub_sensitive_data(value)
            for key, value in data.items()
        }
    elif isinstance(data, list):
        return [scrub_sensitive_data(item) for item in data]
    elif isinstance(data, str):
        return PHONE_PATTERN.sub(lambda m: f"XXXXXXX{m.group(0)[-4:]}", data)
    return data


def _is_sensitive_key(key: str) -> bool:
    key_lower = str(key).lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)


def before_send(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Scrub request payloads and exception messages before sending to Sentry."""
    request = event.get("request")
    if request:
        if "headers" in request:
            request["headers"] = scrub_sensitive_data(request["headers"])
        if "cookies" in request:
            request["cookies"] = {k: "[REDACTED]" for k in request["cookies"]}
        if "data" in request:
            request["data"] = scrub_sensitive_data(request["data"])

    if "extra" in event:
        event["extra"] = scrub_sensitive_data(event["extra"])

    if "exception" in event and "values" in event["exception"]:
        for exception in event["exception"]["values"]:
            if "value" in exception:
                exception["value"] = scrub_sensitive_data(exception["value"])

    return event


def initialize_sentry(
    dsn: Optional[str],
    environment: str = "development",
    traces_sample_rate: float = 0.1,
    release: Optional[str] = None,
) -> None:
    """
    Initialize Sentry SDK with the Django integration.

    Args:
        dsn: Sentry DSN. If empty, Sentry is not initialized.
        environment: Environment name (development, production)
        traces_sample_rate: Share of transactions to trace (0.0 to 1.0)
        release: Release version string
    """
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            DjangoIntegration(transaction_style="url"),
        ],
        before_send=before_send,
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )
