# bo_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from bo_core.iam.constants import ALL_PERMISSIONS, SUPER_PERMISSION
from bo_core.iam.models import Permission, Role, RolePermission, UserProfile
from bo_core.iam.permission_cache import get_permission_cache


@pytest.fixture(autouse=True)
def _fresh_permission_cache():
    """
    The process-wide cache outlives each test's transaction; start clean so
    ids reused by a new test never see another test's permissions.
    """
    get_permission_cache().invalidate_all()
    yield
    get_permission_cache().invalidate_all()


@pytest.fixture
def permissions(db):
    return {name: Permission.objects.get_or_create(name=name)[0] for name in ALL_PERMISSIONS}


@pytest.fixture
def make_role(permissions):
    def _make(name, grants=()):
        role = Role.objects.create(name=name)
        RolePermission.objects.bulk_create(
            [RolePermission(role=role, permission=permissions[g]) for g in grants]
        )
        return role
    return _make


@pytest.fixture
def make_user(make_role):
    """
    Create auth user + profile. `grants` builds a dedicated role; pass
    `role=` to reuse one, or neither for a user without a role.
    """
    counter = {"n": 0}

    def _make(username=None, *, grants=None, role=None, name=None):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        if grants is not None and role is None:
            role = make_role(f"role-{username}", grants)

        user = get_user_model().objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="Pass@12345",
        )
        UserProfile.objects.create(user=user, name=name or username.title(), role=role)
        return user
    return _make


@pytest.fixture
def user(make_user):
    """Administrator through the role table (not a Django superuser)."""
    return make_user("admin", grants=[SUPER_PERMISSION], name="Ada Admin")


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def client_for():
    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c
    return _client


@pytest.fixture
def category(db):
    from bo_core.catalog.models import Category

    return Category.objects.create(name="Beverages")


@pytest.fixture
def item(category):
    from decimal import Decimal

    from bo_core.catalog.models import Item

    return Item.objects.create(name="Coffee", category=category, price=Decimal("12.50"))
