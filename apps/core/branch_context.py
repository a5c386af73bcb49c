"""
Branch context helpers.

Resolves the branch a request acts on and applies it as an equality filter.
Resolution order:

1. explicit ``branch`` argument / query parameter
2. ``X-Branch-ID`` request header
3. the branch selected in the session
4. the user's assigned branch
5. the branch coded MAIN

Non-admin users with an assigned branch are pinned to it. When multi-branch
mode is disabled in the store settings, scoping is a no-op.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional
from uuid import UUID

from django.conf import settings

from apps.core.models import Branch, StoreSettings

logger = logging.getLogger(__name__)

_forced_branch_id: ContextVar[Optional[str]] = ContextVar("forced_branch_id", default=None)


def _coerce_uuid(value) -> Optional[str]:
    if value in (None, ""):
        return None
    try:
        return str(UUID(str(value)))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed branch id: {value!r}")
        return None


def is_multi_branch_enabled() -> bool:
    return StoreSettings.load().multi_branch_enabled


def resolve_branch_id(request, explicit=None) -> Optional[str]:
    """
    Resolve the effective branch id for a request.

    Args:
        request: Django or DRF request (may be None for service calls)
        explicit: Optional branch id supplied by the caller

    Returns:
        Branch id as a string, or None if no branch exists at all.
    """
    forced = _forced_branch_id.get()
    if forced is not None:
        return forced

    user = getattr(request, "user", None) if request is not None else None
    assigned = None
    if user is not None and user.is_authenticated and user.branch_id:
        assigned = str(user.branch_id)
        if not user.can_switch_branch():
            return assigned

    if explicit is None and request is not None:
        query_params = getattr(request, "query_params", None)
        if query_params is None:
            query_params = getattr(request, "GET", {})
        explicit = query_params.get("branch")

    candidates = [explicit]
    if request is not None:
        candidates.append(getattr(request, "selected_branch_id", None))
        session = getattr(request, "session", None)
        if session is not None:
            candidates.append(session.get(settings.BRANCH_SESSION_KEY))
    candidates.append(assigned)

    for candidate in candidates:
        branch_id = _coerce_uuid(candidate)
        if branch_id:
            return branch_id

    main = Branch.get_main()
    return str(main.id) if main else None


def get_current_branch(request, explicit=None) -> Optional[Branch]:
    branch_id = resolve_branch_id(request, explicit)
    if branch_id is None:
        return None
    return Branch.objects.filter(id=branch_id).first()


def scope_to_branch(queryset, branch_id, field="branch"):
    """
    Filter a queryset to one branch when multi-branch mode is on.

    Args:
        queryset: Queryset to filter
        branch_id: Branch id from resolve_branch_id()
        field: Name of the branch foreign key on the model (supports lookups)
    """
    if branch_id is None or not is_multi_branch_enabled():
        return queryset
    return queryset.filter(**{f"{field}_id": branch_id})


def set_current_branch(request, branch: Branch) -> None:
    """Remember the selected branch in the session."""
    request.session[settings.BRANCH_SESSION_KEY] = str(branch.id)
    logger.info(f"User {request.user} switched to branch {branch.code}")


@contextmanager
def branch_context(branch_id):
    """
    Force every resolve_branch_id() call to return the given branch.

    Used by management commands and services that run outside a request.
    """
    token = _forced_branch_id.set(str(branch_id) if branch_id else None)
    logger.debug(f"Entered branch context: {branch_id}")
    try:
        yield
    finally:
        _forced_branch_id.reset(token)
        logger.debug("Left branch context")


class BranchScopedMixin:
    """
    Mixin for DRF views that work on branch-scoped models.

    Subclasses set ``branch_field`` when the foreign key is not named ``branch``.
    """

    branch_field = "branch"

    def get_branch_id(self):
        if not hasattr(self, "_branch_id"):
            self._branch_id = resolve_branch_id(self.request)
        return self._branch_id

    def get_branch(self):
        branch_id = self.get_branch_id()
        return Branch.objects.filter(id=branch_id).first() if branch_id else None

    def scope(self, queryset):
        return scope_to_branch(queryset, self.get_branch_id(), self.branch_field)
