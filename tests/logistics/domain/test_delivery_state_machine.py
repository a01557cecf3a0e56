"""Tests for the Delivery state machine — permitted edges, terminal states and claim semantics."""

import pytest
from logistics.delivery.delivery import (
    DRIVER_REQUIRED_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    Delivery,
    DeliveryStatus,
)
from logistics.errors import InvalidTransition, PreconditionFailed
from protean.exceptions import ValidationError


def _make_delivery(**overrides):
    defaults = {
        "owner_id": "biz-001",
        "customer_name": "Jane Doe",
        "customer_phone": "+1-555-0123",
        "pickup_address": "12 Dock Road, Springfield",
        "drop_address": "400 Elm Street, Shelbyville",
        "weight": 5.0,
    }
    defaults.update(overrides)
    return Delivery.create(**defaults)


def _delivery_at_state(target_status, driver_id="drv-001"):
    """Create a delivery and advance it to the desired state through its public methods."""
    delivery = _make_delivery()
    delivery._events.clear()

    if target_status == DeliveryStatus.PENDING:
        return delivery

    delivery.assign_driver(driver_id, assigned_by="adm-001")
    if target_status == DeliveryStatus.CANCELLED:
        delivery.transition_to(DeliveryStatus.CANCELLED, changed_by="adm-001")
        delivery._events.clear()
        return delivery

    for step in (DeliveryStatus.ACCEPTED, DeliveryStatus.ON_WAY, DeliveryStatus.DELIVERED):
        delivery.transition_to(step, changed_by=driver_id)
        if step == target_status:
            break
    delivery._events.clear()
    return delivery


_NON_EDGES = [
    (current, target) for current in DeliveryStatus for target in DeliveryStatus if target not in TRANSITIONS[current]
]


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(DeliveryStatus)

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED}

    def test_no_self_transitions(self):
        for status, targets in TRANSITIONS.items():
            assert status not in targets

    def test_driver_required_statuses(self):
        assert DRIVER_REQUIRED_STATUSES == {
            DeliveryStatus.ACCEPTED,
            DeliveryStatus.ON_WAY,
            DeliveryStatus.DELIVERED,
        }


class TestValidTransitions:
    def test_new_delivery_is_pending_without_driver(self):
        delivery = _make_delivery()
        assert delivery.status == DeliveryStatus.PENDING.value
        assert delivery.driver_id is None

    def test_pending_to_accepted(self):
        delivery = _delivery_at_state(DeliveryStatus.PENDING)
        delivery.assign_driver("drv-001", assigned_by="adm-001")
        delivery.transition_to(DeliveryStatus.ACCEPTED, changed_by="drv-001")
        assert delivery.status == DeliveryStatus.ACCEPTED.value

    def test_accepted_to_on_way(self):
        delivery = _delivery_at_state(DeliveryStatus.ACCEPTED)
        delivery.transition_to(DeliveryStatus.ON_WAY, changed_by="drv-001")
        assert delivery.status == DeliveryStatus.ON_WAY.value

    def test_on_way_to_delivered_records_actuals(self):
        delivery = _delivery_at_state(DeliveryStatus.ON_WAY)
        delivery.transition_to(DeliveryStatus.DELIVERED, changed_by="drv-001", actual_km=12.5, actual_cost=340.0)
        assert delivery.status == DeliveryStatus.DELIVERED.value
        assert delivery.actual_km == 12.5
        assert delivery.actual_cost == 340.0

    def test_delivered_without_actuals(self):
        delivery = _delivery_at_state(DeliveryStatus.ON_WAY)
        delivery.transition_to(DeliveryStatus.DELIVERED, changed_by="drv-001")
        assert delivery.status == DeliveryStatus.DELIVERED.value
        assert delivery.actual_km is None

    @pytest.mark.parametrize(
        "status",
        [DeliveryStatus.PENDING, DeliveryStatus.ACCEPTED, DeliveryStatus.ON_WAY],
    )
    def test_cancel_from_non_terminal(self, status):
        delivery = _delivery_at_state(status)
        delivery.transition_to(DeliveryStatus.CANCELLED, changed_by="adm-001")
        assert delivery.status == DeliveryStatus.CANCELLED.value

    def test_cancel_pending_without_driver(self):
        delivery = _make_delivery()
        delivery.transition_to(DeliveryStatus.CANCELLED, changed_by="adm-001")
        assert delivery.status == DeliveryStatus.CANCELLED.value
        assert delivery.driver_id is None

    def test_each_transition_bumps_revision(self):
        delivery = _delivery_at_state(DeliveryStatus.ACCEPTED)
        before = delivery.revision
        delivery.transition_to(DeliveryStatus.ON_WAY, changed_by="drv-001")
        assert delivery.revision == before + 1


class TestInvalidTransitions:
    @pytest.mark.parametrize("current,target", _NON_EDGES)
    def test_non_edges_are_rejected(self, current, target):
        delivery = _delivery_at_state(current)
        with pytest.raises(InvalidTransition):
            delivery.transition_to(target, changed_by="adm-001")
        assert delivery.status == current.value

    def test_pending_to_on_way_is_rejected(self):
        delivery = _delivery_at_state(DeliveryStatus.PENDING)
        delivery.assign_driver("drv-001", assigned_by="adm-001")
        with pytest.raises(InvalidTransition) as exc:
            delivery.transition_to(DeliveryStatus.ON_WAY, changed_by="drv-001")
        assert exc.value.rule == "permitted_edge"

    def test_second_delivered_is_rejected(self):
        delivery = _delivery_at_state(DeliveryStatus.DELIVERED)
        with pytest.raises(InvalidTransition):
            delivery.transition_to(DeliveryStatus.DELIVERED, changed_by="drv-001", actual_km=1.0, actual_cost=1.0)

    def test_rejected_transition_leaves_revision_unchanged(self):
        delivery = _delivery_at_state(DeliveryStatus.ACCEPTED)
        before = delivery.revision
        with pytest.raises(InvalidTransition):
            delivery.transition_to(DeliveryStatus.PENDING, changed_by="drv-001")
        assert delivery.revision == before


class TestPreconditions:
    def test_accept_without_driver_fails(self):
        delivery = _make_delivery()
        with pytest.raises(PreconditionFailed) as exc:
            delivery.transition_to(DeliveryStatus.ACCEPTED, changed_by="adm-001")
        assert exc.value.rule == "driver_assigned"
        assert delivery.status == DeliveryStatus.PENDING.value

    def test_actuals_on_non_delivered_target_fail(self):
        delivery = _delivery_at_state(DeliveryStatus.ACCEPTED)
        with pytest.raises(ValidationError):
            delivery.transition_to(DeliveryStatus.ON_WAY, changed_by="drv-001", actual_km=3.0)
        assert delivery.status == DeliveryStatus.ACCEPTED.value
        assert delivery.actual_km is None


class TestAssignment:
    def test_assign_keeps_status_pending(self):
        delivery = _make_delivery()
        delivery.assign_driver("drv-001", assigned_by="adm-001")
        assert delivery.driver_id == "drv-001"
        assert delivery.status == DeliveryStatus.PENDING.value

    def test_reassign_while_pending_replaces_driver(self):
        delivery = _make_delivery()
        delivery.assign_driver("drv-001", assigned_by="adm-001")
        delivery.assign_driver("drv-002", assigned_by="adm-001")
        assert delivery.driver_id == "drv-002"

    @pytest.mark.parametrize(
        "status",
        [DeliveryStatus.ACCEPTED, DeliveryStatus.ON_WAY, DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED],
    )
    def test_assign_after_pending_is_rejected(self, status):
        delivery = _delivery_at_state(status)
        with pytest.raises(InvalidTransition) as exc:
            delivery.assign_driver("drv-002", assigned_by="adm-001")
        assert exc.value.rule == "assign_only_while_pending"
        if status != DeliveryStatus.CANCELLED:
            assert delivery.driver_id == "drv-001"

    def test_driver_stays_set_once_claimed(self):
        delivery = _delivery_at_state(DeliveryStatus.DELIVERED)
        assert delivery.driver_id == "drv-001"
