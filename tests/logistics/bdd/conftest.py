"""Shared BDD fixtures and step definitions for the delivery lifecycle."""

import pytest
from logistics.delivery import intents
from logistics.delivery.authorization import Caller
from logistics.user.registration import register_user
from logistics.user.user import UserRole
from pytest_bdd import given, parsers, then


@pytest.fixture()
def people():
    """Registered participants by scenario name."""
    return {}


@pytest.fixture()
def error():
    """Container for the error a rejected intent raised."""
    return {"exc": None}


def _register(people, name, role):
    user = register_user(f"{name.lower()}@fleetdesk.example", f"User {name}", role.value)
    people[name] = Caller.of(user.id, role)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a business user "{name}"'))
def a_business_user(people, name):
    _register(people, name, UserRole.BUSINESS_USER)


@given(parsers.cfparse('an administrator "{name}"'))
def an_administrator(people, name):
    _register(people, name, UserRole.ADMIN)


@given(parsers.cfparse('a driver "{name}"'))
def a_driver(people, name):
    _register(people, name, UserRole.DRIVER)


@given(parsers.cfparse('"{owner}" has requested a delivery'), target_fixture="delivery")
def requested_delivery(people, owner):
    return intents.create_delivery(
        people[owner],
        customer_name="Jane Doe",
        customer_phone="+1-555-0123",
        pickup_address="12 Dock Road, Springfield",
        drop_address="400 Elm Street, Shelbyville",
        weight=5.0,
    )


@given(
    parsers.cfparse('administrator "{admin}" has assigned driver "{driver}"'),
    target_fixture="delivery",
)
def assigned_delivery(people, delivery, admin, driver):
    return intents.assign_driver(people[admin], str(delivery.id), people[driver].user_id)


@given(parsers.cfparse('driver "{driver}" has accepted the delivery'), target_fixture="delivery")
def accepted_delivery(people, delivery, driver):
    return intents.transition_status(people[driver], str(delivery.id), "ACCEPTED")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the delivery status is "{status}"'))
def delivery_status_is(delivery, status):
    assert delivery.status == status


@then("the delivery has no driver")
def delivery_has_no_driver(delivery):
    assert delivery.driver_id is None


@then(parsers.cfparse('the delivery driver is "{name}"'))
def delivery_driver_is(people, delivery, name):
    assert delivery.driver_id == people[name].user_id


@then(parsers.cfparse('the intent fails with "{error_name}"'))
def intent_fails_with(error, error_name):
    assert error["exc"] is not None, f"Expected {error_name} but the intent succeeded"
    assert type(error["exc"]).__name__ == error_name
    error["exc"] = None


@then(parsers.cfparse("the actual distance is {km:g} km at a cost of {cost:g}"))
def actuals_are(delivery, km, cost):
    assert delivery.actual_km == km
    assert delivery.actual_cost == cost


@then(parsers.cfparse('the status history reads "{statuses}"'))
def status_history_reads(people, delivery, statuses):
    owner = next(c for c in people.values() if c.user_id == str(delivery.owner_id))
    history = intents.status_history(owner, str(delivery.id))
    assert [e.new_status for e in history] == [s.strip() for s in statuses.split(",")]
