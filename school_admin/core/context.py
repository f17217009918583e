"""
Request-scoped context.

Each inbound request gets a fresh store bound to a ContextVar. The store is a
plain dict shared by reference, so values written by a dependency running in a
worker thread are visible to the endpoint of the same request, while
concurrent requests never see each other's store.
"""
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional
from uuid import UUID

from school_admin.core.errors import TenantRequired
from school_admin.core.logger import logger
from school_admin.core.permissions import Role

USER_ID = "user_id"
ROLE = "role"
INSTITUTE_ID = "institute_id"
USER = "user"

_request_store: ContextVar[Optional[dict]] = ContextVar("request_store", default=None)


@contextmanager
def request_scope() -> Iterator[dict]:
    store: dict = {}
    token = _request_store.set(store)
    try:
        yield store
    finally:
        _request_store.reset(token)


class RequestContextMiddleware:
    """Pure ASGI middleware opening one request scope per HTTP request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        with request_scope():
            await self.app(scope, receive, send)


def set_context(key: str, value: Any) -> None:
    store = _request_store.get()
    if store is not None:
        store[key] = value


def get_context(key: str) -> Any:
    store = _request_store.get()
    return store.get(key) if store is not None else None


def get_user_id() -> Optional[UUID]:
    return get_context(USER_ID)


def get_user_role() -> Optional[str]:
    return get_context(ROLE)


def get_institute_id() -> Optional[UUID]:
    return get_context(INSTITUTE_ID)


def get_user():
    return get_context(USER)


def set_auth_context(user) -> None:
    set_context(USER_ID, user.id)
    set_context(ROLE, user.role)
    set_context(USER, user)

    if user.role != Role.SUPER_ADMIN.value and user.institute_id:
        set_context(INSTITUTE_ID, user.institute_id)
        logger.debug(f"INSTITUTE CONTEXT SET | institute_id={user.institute_id}")


def resolve_institute_id(explicit: Optional[UUID] = None, *, allow_explicit: bool = False) -> UUID:
    """
    Institute to scope a storage operation to.

    The authorization-derived context value always wins; a caller-supplied
    value is only honoured for operations that opt in (administrator flows
    where the caller has no institute of their own).
    """
    institute_id = get_institute_id()
    if institute_id is None and allow_explicit:
        institute_id = explicit
    if institute_id is None:
        raise TenantRequired()
    return institute_id
