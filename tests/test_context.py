import threading
import uuid
from types import SimpleNamespace

import pytest

from school_admin.core import context
from school_admin.core.errors import TenantRequired


def _user(role="TEACHER", institute_id=None):
    return SimpleNamespace(id=uuid.uuid4(), role=role, institute_id=institute_id)


def test_outside_a_scope_everything_is_unset():
    assert context.get_context("anything") is None
    assert context.get_user_id() is None
    context.set_context("user_id", "ignored")
    assert context.get_user_id() is None


def test_scope_is_discarded_on_exit():
    with context.request_scope():
        context.set_context("role", "TEACHER")
        assert context.get_user_role() == "TEACHER"
    assert context.get_user_role() is None


def test_auth_context_for_tenant_user():
    institute_id = uuid.uuid4()
    user = _user("INSTITUTE_ADMIN", institute_id)
    with context.request_scope():
        context.set_auth_context(user)
        assert context.get_user_id() == user.id
        assert context.get_user_role() == "INSTITUTE_ADMIN"
        assert context.get_institute_id() == institute_id
        assert context.get_user() is user


def test_super_admin_gets_no_institute():
    with context.request_scope():
        context.set_auth_context(_user("SUPER_ADMIN", None))
        assert context.get_institute_id() is None


def test_concurrent_scopes_are_isolated():
    seen = {}
    barrier = threading.Barrier(2)

    def worker(name):
        with context.request_scope():
            context.set_context("user_id", name)
            barrier.wait()
            seen[name] = context.get_user_id()

    threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert seen == {"a": "a", "b": "b"}


def test_resolve_prefers_context_over_explicit():
    institute_id, forged = uuid.uuid4(), uuid.uuid4()
    with context.request_scope():
        context.set_auth_context(_user("INSTITUTE_ADMIN", institute_id))
        assert context.resolve_institute_id(forged, allow_explicit=True) == institute_id


def test_resolve_explicit_only_when_allowed():
    explicit = uuid.uuid4()
    with context.request_scope():
        context.set_auth_context(_user("SUPER_ADMIN"))
        assert context.resolve_institute_id(explicit, allow_explicit=True) == explicit
        with pytest.raises(TenantRequired):
            context.resolve_institute_id(explicit)


def test_resolve_without_any_tenant():
    with pytest.raises(TenantRequired) as exc:
        context.resolve_institute_id()
    assert exc.value.status_code == 400
