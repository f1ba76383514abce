from __future__ import annotations

import re

from django.utils.deprecation import MiddlewareMixin

from a1_core.common.api.exceptions import ensure_request_id


_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id and echoes it back as X-Request-Id.

    Behavior:
      - A well-formed inbound X-Request-Id (proxy / client supplied) is reused.
      - Anything else is replaced by a fresh uuid4 hex.
      - The same id appears in every error envelope and in server-side logs,
        so a client-visible failure can be matched to its traceback.
    """

    HEADER_META_KEY = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-Id"

    def process_request(self, request):
        inbound = request.META.get(self.HEADER_META_KEY, "")
        if inbound and _REQUEST_ID_RE.match(inbound):
            request.request_id = inbound
        else:
            request.request_id = None
        ensure_request_id(request)
        return None

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.RESPONSE_HEADER] = rid
        return response
