"""
Request logging with credential redaction.

Payment proofs travel in request headers and must never reach the logs.
Every line is a single JSON object so log collectors can index the fields.
"""
import hashlib
import json
import logging
import re
import time
import uuid
from typing import Any, Dict, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import Request

logger = logging.getLogger(__name__)

REDACTED = '[REDACTED]'

_OPERATION_PATH = re.compile(r'^/api/entrypoints/([^/]+)/invoke/?$')


class SecureLogger:
    """
    Builds log-safe summaries of requests and responses.

    Header values are dropped outright when the header can carry a credential.
    Query parameters are matched by substring, so ``payment_proof`` is caught
    by ``payment``.
    """

    SENSITIVE_HEADERS: Set[str] = {
        'authorization',
        'proxy-authorization',
        'cookie',
        'set-cookie',
        'x-api-key',
        'x-payment',
        'x-payment-response',
        'x-forwarded-for',
        'x-real-ip',
    }

    SENSITIVE_PARAMS: Set[str] = {
        'api_key',
        'apikey',
        'token',
        'secret',
        'password',
        'signature',
        'payment',
    }

    MAX_VALUE_LENGTH = 200

    @classmethod
    def generate_request_id(cls) -> str:
        """Request ID in the form ``req_<epoch ms>_<8 hex chars>``."""
        return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"

    @classmethod
    def sanitize_headers(cls, headers: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: REDACTED if key.lower().strip() in cls.SENSITIVE_HEADERS
            else str(value)[:cls.MAX_VALUE_LENGTH]
            for key, value in (headers or {}).items()
        }

    @classmethod
    def sanitize_params(cls, params: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = {}
        for key, value in (params or {}).items():
            lowered = key.lower().strip()
            if any(marker in lowered for marker in cls.SENSITIVE_PARAMS):
                sanitized[key] = REDACTED
            else:
                sanitized[key] = value
        return sanitized

    @staticmethod
    def operation_for_path(path: str) -> Optional[str]:
        """Catalog key for an invoke route, ``None`` for any other path."""
        match = _OPERATION_PATH.match(path)
        return match.group(1) if match else None

    @classmethod
    def format_request_log(
        cls,
        request: 'Request',
        request_id: str,
        include_headers: bool = False
    ) -> Dict[str, Any]:
        """
        Summarize an incoming request.

        The client address is reduced to a short hash: enough to correlate
        calls from one caller, not enough to identify it. ``paid`` records
        whether a payment proof was attached, never the proof itself.
        """
        path = request.url.path
        log_data: Dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": path,
            "operation": cls.operation_for_path(path),
            "query_params": cls.sanitize_params(dict(request.query_params)),
            "paid": "x-payment" in request.headers,
            "user_agent": request.headers.get("user-agent", "unknown")[:cls.MAX_VALUE_LENGTH],
        }

        if request.client:
            log_data["client_hash"] = hashlib.sha256(request.client.host.encode()).hexdigest()[:8]

        if include_headers:
            log_data["headers"] = cls.sanitize_headers(dict(request.headers))

        return log_data

    @staticmethod
    def status_category(status_code: int) -> str:
        if status_code == 402:
            return "payment_required"
        if 200 <= status_code < 300:
            return "success"
        if 400 <= status_code < 500:
            return "client_error"
        if 500 <= status_code < 600:
            return "server_error"
        return "other"

    @classmethod
    def format_response_log(cls, request_id: str, status_code: int, duration_ms: float) -> Dict[str, Any]:
        return {
            "request_id": request_id,
            "status_code": status_code,
            "status_category": cls.status_category(status_code),
            "duration_ms": round(duration_ms, 2),
        }

    @classmethod
    def format_error_log(cls, request_id: str, error: Exception) -> Dict[str, Any]:
        return {
            "request_id": request_id,
            "error_type": type(error).__name__,
            "error_message": str(error)[:1000],
        }


def log_secure(level: str, message: str, data: Dict[str, Any], request_id: Optional[str] = None):
    """Write ``message`` and ``data`` as one JSON log line at ``level``."""
    if request_id:
        data["request_id"] = request_id

    log_json = json.dumps({"message": message, "data": data}, default=str)
    log_level = logging.getLevelName(level.upper())
    logger.log(log_level if isinstance(log_level, int) else logging.DEBUG, log_json)
