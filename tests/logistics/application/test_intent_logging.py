"""Application tests for the caller context attached to intent log lines."""

import pytest
import structlog
from logistics.delivery import intents
from logistics.errors import Forbidden


@pytest.fixture()
def delivery(business):
    return intents.create_delivery(
        business,
        customer_name="Jane Doe",
        customer_phone="+1-555-0123",
        pickup_address="12 Dock Road, Springfield",
        drop_address="400 Elm Street, Shelbyville",
        weight=5.0,
    )


@pytest.fixture(autouse=True)
def _clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


class TestCallerContext:
    def test_caller_bound_while_intent_runs(self, monkeypatch, admin, driver, delivery):
        seen = {}
        retries = intents.with_storage_retries

        def record_then_run(operation, intent):
            seen.update(structlog.contextvars.get_contextvars())
            return retries(operation, intent)

        monkeypatch.setattr(intents, "with_storage_retries", record_then_run)
        intents.assign_driver(admin, str(delivery.id), driver.user_id)

        assert seen["caller_id"] == admin.user_id
        assert seen["caller_role"] == "ADMIN"

    def test_caller_unbound_after_accepted_intent(self, admin, driver, delivery):
        intents.assign_driver(admin, str(delivery.id), driver.user_id)
        assert "caller_id" not in structlog.contextvars.get_contextvars()

    def test_caller_unbound_after_rejected_intent(self, business, driver, delivery):
        with pytest.raises(Forbidden):
            intents.assign_driver(business, str(delivery.id), driver.user_id)
        assert "caller_id" not in structlog.contextvars.get_contextvars()

    def test_outer_context_is_restored(self, admin, driver, delivery):
        structlog.contextvars.bind_contextvars(caller_id="upstream", request_id="req-1")
        intents.assign_driver(admin, str(delivery.id), driver.user_id)

        context = structlog.contextvars.get_contextvars()
        assert context["caller_id"] == "upstream"
        assert context["request_id"] == "req-1"
