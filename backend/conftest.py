"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import cache

from tenant.managers import set_current_tenant


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_tenant_context():
    """
    Reset tenant context after each test.

    CRITICAL: This prevents tenant context from leaking between tests.
    If tenant context leaks, tests may pass when they should fail.
    """
    yield

    set_current_tenant(None)


@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """Clear cache after each test to prevent cache pollution."""
    yield
    cache.clear()


# ============================================================================
# TENANT / USER FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """
    Workspace A. Creating it seeds the standard units (g, kg, mg, ml, l, un, dz).
    """
    from tenant.models import Tenant
    return Tenant.objects.create(name="Pizza Place A", slug="pizza-a")


@pytest.fixture
def tenant_b(db):
    """Workspace B, for isolation tests."""
    from tenant.models import Tenant
    return Tenant.objects.create(name="Burger Place B", slug="burger-b")


@pytest.fixture
def member_user_tenant_a(django_user_model, tenant_a):
    """A non-staff user who is a member of workspace A."""
    user = django_user_model.objects.create_user(
        username="member-a",
        email="member@pizza-a.com",
        password="test-pass-123",
    )
    tenant_a.members.add(user)
    return user


@pytest.fixture
def outsider_user(django_user_model):
    """An authenticated user who belongs to no workspace."""
    return django_user_model.objects.create_user(
        username="outsider",
        email="outsider@example.com",
        password="test-pass-123",
    )


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/health/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_client_tenant_a(api_client, member_user_tenant_a):
    """
    Provide an API client logged in as a member of workspace A.

    Usage:
        def test_protected_endpoint(authenticated_client_tenant_a):
            response = authenticated_client_tenant_a.post(
                '/api/cogs/workspaces/pizza-a/recalculate-recipes/'
            )
            assert response.status_code == 200
    """
    api_client.force_authenticate(user=member_user_tenant_a)
    return api_client


@pytest.fixture
def outsider_client(api_client, outsider_user):
    """API client logged in as a user with no workspace membership."""
    api_client.force_authenticate(user=outsider_user)
    return api_client
