from __future__ import annotations

from django.http import JsonResponse

from .services.config import configuration_error

EXEMPT_PATH_PREFIXES = ("/api/health/",)


class ConfigurationGuardMiddleware:
    """
    Block every API request while the AI credential is missing.

    The check runs once, when the handler loads its middleware chain.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.error = configuration_error()

    def __call__(self, request):
        if self.error is not None and not request.path.startswith(EXEMPT_PATH_PREFIXES):
            payload = self.error.as_payload()
            payload["error"]["title"] = "Configuration Error"
            return JsonResponse(payload, status=self.error.status_code)
        return self.get_response(request)
