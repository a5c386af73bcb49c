"""
Branch context middleware.

Reads the branch a client selected (``X-Branch-ID`` header) and exposes it as
``request.selected_branch_id``. The user-based fallbacks are applied later by
``resolve_branch_id`` because JWT authentication only happens inside DRF views.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

from apps.core.models import Branch

logger = logging.getLogger(__name__)


class BranchContextMiddleware(MiddlewareMixin):
    """
    Attach the requested branch to each request.

    Rejects malformed or unknown branch ids with a JSON error instead of
    silently falling back to another branch.
    """

    EXEMPT_PATHS = [
        "/admin/",
        "/metrics",
        "/static/",
        "/media/",
    ]

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        request.selected_branch_id = None

        if any(request.path.startswith(path) for path in self.EXEMPT_PATHS):
            return None

        raw_branch_id = request.META.get(settings.BRANCH_HEADER, "").strip()
        if not raw_branch_id:
            return None

        try:
            branch_id = UUID(raw_branch_id)
        except ValueError:
            logger.warning(f"Malformed branch header: {raw_branch_id!r}")
            return JsonResponse({"detail": "Invalid branch identifier."}, status=400)

        branch = Branch.objects.filter(id=branch_id).only("id", "is_active").first()
        if branch is None:
            return JsonResponse({"detail": "Branch not found."}, status=404)
        if not branch.is_active:
            return JsonResponse({"detail": "Branch is inactive."}, status=403)

        request.selected_branch_id = str(branch.id)
        return None
