"""Tests for the authorization predicate."""

import pytest
from logistics.delivery.authorization import Caller, Operation, allowed_operations, can_create, is_allowed
from logistics.delivery.delivery import Delivery
from logistics.user.user import UserRole
from protean.exceptions import ValidationError


@pytest.fixture()
def delivery():
    delivery = Delivery.create(
        owner_id="biz-001",
        customer_name="Jane Doe",
        customer_phone="+1-555-0123",
        pickup_address="12 Dock Road, Springfield",
        drop_address="400 Elm Street, Shelbyville",
        weight=5.0,
    )
    delivery.assign_driver("drv-001", assigned_by="adm-001")
    return delivery


class TestAllowedOperations:
    def test_admin_may_do_everything(self, delivery):
        assert allowed_operations(UserRole.ADMIN, "adm-001", delivery) == {
            Operation.VIEW,
            Operation.ASSIGN,
            Operation.TRANSITION,
        }

    def test_owner_may_only_view(self, delivery):
        assert allowed_operations(UserRole.BUSINESS_USER, "biz-001", delivery) == {Operation.VIEW}

    def test_other_business_user_gets_nothing(self, delivery):
        assert allowed_operations(UserRole.BUSINESS_USER, "biz-002", delivery) == frozenset()

    def test_assigned_driver_may_view_and_transition(self, delivery):
        assert allowed_operations(UserRole.DRIVER, "drv-001", delivery) == {Operation.VIEW, Operation.TRANSITION}

    def test_unassigned_driver_gets_nothing(self, delivery):
        assert allowed_operations(UserRole.DRIVER, "drv-002", delivery) == frozenset()

    def test_driver_never_assigns(self, delivery):
        assert not is_allowed(Caller.of("drv-001", UserRole.DRIVER), Operation.ASSIGN, delivery)

    def test_reassignment_revokes_previous_driver(self, delivery):
        delivery.assign_driver("drv-002", assigned_by="adm-001")
        assert allowed_operations(UserRole.DRIVER, "drv-001", delivery) == frozenset()
        assert Operation.TRANSITION in allowed_operations(UserRole.DRIVER, "drv-002", delivery)


class TestCreation:
    @pytest.mark.parametrize(
        "role,expected",
        [(UserRole.BUSINESS_USER, True), (UserRole.ADMIN, False), (UserRole.DRIVER, False)],
    )
    def test_only_business_users_create(self, role, expected):
        assert can_create(role) is expected


class TestCaller:
    def test_from_role_name(self):
        caller = Caller.of("drv-001", "DRIVER")
        assert caller.role == UserRole.DRIVER
        assert caller.user_id == "drv-001"

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            Caller.of("someone", "SUPERUSER")

    def test_is_immutable(self):
        caller = Caller.of("adm-001", UserRole.ADMIN)
        with pytest.raises(AttributeError):
            caller.role = UserRole.DRIVER
