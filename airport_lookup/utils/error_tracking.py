"""Error tracking and monitoring setup."""
import os
import logging
from typing import Optional
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration
from airport_lookup.core.config import SENTRY_DSN


def filter_sensitive_data(event, hint):
    """Filter credentials from Sentry events."""
    request = event.get('request')
    if request:
        if 'headers' in request:
            sensitive_headers = ['authorization', 'x-api-key', 'cookie', 'set-cookie']
            request['headers'] = {
                k: '***REDACTED***' if k.lower() in sensitive_headers else v
                for k, v in request['headers'].items()
            }

        data = request.get('data')
        if isinstance(data, dict):
            for key in ('client_id', 'client_secret', 'access_token', 'password'):
                if key in data:
                    data[key] = '***REDACTED***'

    extra = event.get('extra')
    if isinstance(extra, dict):
        for key in list(extra.keys()):
            if any(s in key.upper() for s in ('SECRET', 'TOKEN', 'PASSWORD')):
                extra[key] = '***REDACTED***'

    return event


def setup_error_tracking(
    dsn: Optional[str] = None,
    environment: Optional[str] = None,
    release: Optional[str] = None,
    traces_sample_rate: float = 0.1
) -> bool:
    """
    Setup Sentry error tracking.

    Args:
        dsn: Sentry DSN (falls back to SENTRY_DSN)
        environment: Environment name (development, staging, production)
        release: Release version
        traces_sample_rate: Percentage of transactions to trace (0.0 to 1.0)

    Returns:
        True if Sentry was initialized, False otherwise
    """
    dsn = dsn or SENTRY_DSN
    if not dsn:
        logging.info("Sentry DSN not provided. Error tracking disabled.")
        return False

    environment = environment or os.getenv("ENVIRONMENT", "development")
    release = release or os.getenv("RELEASE", "unknown")

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        traces_sample_rate=traces_sample_rate,
        before_send=filter_sensitive_data,
        attach_stacktrace=True,
        send_default_pii=False,
    )

    logging.info(f"Sentry error tracking initialized for environment: {environment}")
    return True


def is_enabled() -> bool:
    """True once sentry_sdk.init has bound a client."""
    return sentry_sdk.get_client().is_active()


def capture_exception(error: Exception, context: Optional[dict] = None) -> bool:
    """Capture exception and send to Sentry if initialized."""
    if not is_enabled():
        return False

    with sentry_sdk.new_scope() as scope:
        if context:
            for key, value in context.items():
                scope.set_context(key, {"value": str(value)})
        sentry_sdk.capture_exception(error)
    return True

