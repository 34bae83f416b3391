"""Unit tests for permission resolution and the authorization decision."""

import pytest

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.permissions import (
    ALL_PERMISSIONS,
    FORBIDDEN,
    PERMISSION_CATALOG,
    UNAUTHENTICATED,
    authorize,
    resolve_permissions,
)
from fleetdesk.models.role import Role


def _context(permissions=(), *, super_admin=False) -> AuthContext:
    return AuthContext(
        user_id="u-1",
        role_name="super-admin" if super_admin else "ops",
        permissions=frozenset(permissions),
        is_super_admin=super_admin,
        company_id=None if super_admin else "c-1",
        status="active",
    )


@pytest.mark.unit
class TestResolvePermissions:

    def test_role_permissions_only(self):
        role = Role(name="ops", permissions=["voyage.view", "noon.view"], status="active")
        effective = resolve_permissions(role)
        assert effective.slugs == {"voyage.view", "noon.view"}
        assert not effective.is_super_admin

    def test_additional_extends_role(self):
        role = Role(name="ops", permissions=["voyage.view"], status="active")
        effective = resolve_permissions(role, ["voyage.edit"], [])
        assert effective.slugs == {"voyage.view", "voyage.edit"}

    def test_excluded_removes_role_permission(self):
        role = Role(name="ops", permissions=["voyage.view", "voyage.edit"], status="active")
        effective = resolve_permissions(role, [], ["voyage.edit"])
        assert effective.slugs == {"voyage.view"}

    def test_exclusion_wins_over_additional(self):
        """A slug in both override lists is excluded, without an error."""
        role = Role(name="ops", permissions=["voyage.view"], status="active")
        effective = resolve_permissions(role, ["voyage.edit"], ["voyage.edit"])
        assert "voyage.edit" not in effective.slugs

    def test_missing_role_gives_only_additional(self):
        effective = resolve_permissions(None, ["noon.view"], None)
        assert effective.slugs == {"noon.view"}
        assert not effective.is_super_admin

    def test_missing_role_and_overrides_is_empty(self):
        effective = resolve_permissions(None)
        assert effective.slugs == frozenset()

    def test_inactive_role_grants_nothing(self):
        role = Role(name="ops", permissions=["voyage.view"], status="inactive")
        assert resolve_permissions(role).slugs == frozenset()

    def test_super_admin_is_tagged_not_materialized(self):
        role = Role(name="Super-Admin", permissions=[], status="active")
        effective = resolve_permissions(role)
        assert effective.is_super_admin
        assert effective.slugs == frozenset()
        context = _context(effective.slugs, super_admin=effective.is_super_admin)
        assert authorize(context, "anything.at.all").allowed

    def test_inactive_super_admin_role_has_no_bypass(self):
        role = Role(name="super-admin", permissions=[], status="inactive")
        assert not resolve_permissions(role).is_super_admin


@pytest.mark.unit
class TestAuthorize:

    def test_no_context_is_unauthenticated(self):
        decision = authorize(None, "voyage.view")
        assert not decision.allowed
        assert decision.reason == UNAUTHENTICATED

    def test_super_admin_allows_unknown_slug(self):
        decision = authorize(_context(super_admin=True), "not.in.catalog")
        assert decision.allowed

    def test_granted_slug_is_allowed(self):
        assert authorize(_context({"noon.view"}), "noon.view").allowed

    def test_missing_slug_is_forbidden(self):
        decision = authorize(_context({"noon.view"}), "noon.delete")
        assert not decision.allowed
        assert decision.reason == FORBIDDEN

    def test_idempotent(self):
        context = _context({"noon.view"})
        first = authorize(context, "noon.view")
        second = authorize(context, "noon.view")
        assert first == second

    def test_ops_scenario(self):
        """Role ops = {voyage.view}; user adds voyage.edit, later excludes it."""
        role = Role(name="ops", permissions=["voyage.view"], status="active")

        granted = resolve_permissions(role, ["voyage.edit"], [])
        context = _context(granted.slugs)
        assert authorize(context, "voyage.edit").allowed
        assert authorize(context, "voyage.delete").reason == FORBIDDEN

        revoked = resolve_permissions(role, ["voyage.edit"], ["voyage.edit"])
        assert not authorize(_context(revoked.slugs), "voyage.edit").allowed


@pytest.mark.unit
class TestCatalog:

    def test_slugs_are_unique(self):
        slugs = [slug for entries in PERMISSION_CATALOG.values() for slug, _ in entries]
        assert len(slugs) == len(set(slugs)) == len(ALL_PERMISSIONS)

    def test_slugs_follow_resource_action_naming(self):
        for slug in ALL_PERMISSIONS:
            resource, _, action = slug.partition(".")
            assert resource and action, slug
            assert slug == slug.lower()
