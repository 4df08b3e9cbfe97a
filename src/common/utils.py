import typing as t

from django.http import HttpRequest


def get_client_ip(request: HttpRequest) -> str:
    """Extract the client IP address from a request.

    Checks X-Forwarded-For first (first hop), then X-Real-IP, then REMOTE_ADDR.

    Args:
        request: Django HttpRequest

    Returns:
        The client IP, or "unknown" when none is available.
    """
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return t.cast(str, xff.split(",")[0].strip())
    real_ip = request.META.get("HTTP_X_REAL_IP")
    if real_ip:
        return t.cast(str, real_ip.strip())
    return t.cast(str, request.META.get("REMOTE_ADDR") or "unknown")
