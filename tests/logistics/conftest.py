import pytest
from logistics.delivery.authorization import Caller
from logistics.user.registration import register_user
from logistics.user.user import UserRole
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def logistics_bed():
    from logistics.domain import logistics

    bed = DomainFixture(logistics)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(logistics_bed):
    with logistics_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Registered participants
# ---------------------------------------------------------------------------
@pytest.fixture()
def admin():
    user = register_user("ops@fleetdesk.example", "Olive Ops", UserRole.ADMIN.value)
    return Caller.of(user.id, UserRole.ADMIN)


@pytest.fixture()
def business():
    user = register_user("orders@acme.example", "Acme Orders", UserRole.BUSINESS_USER.value, "+1-555-0100")
    return Caller.of(user.id, UserRole.BUSINESS_USER)


@pytest.fixture()
def other_business():
    user = register_user("shipping@globex.example", "Globex Shipping", UserRole.BUSINESS_USER.value)
    return Caller.of(user.id, UserRole.BUSINESS_USER)


@pytest.fixture()
def driver():
    user = register_user("dana@drivers.example", "Dana Driver", UserRole.DRIVER.value, "+1-555-0142")
    return Caller.of(user.id, UserRole.DRIVER)


@pytest.fixture()
def other_driver():
    user = register_user("rik@drivers.example", "Rik Roads", UserRole.DRIVER.value)
    return Caller.of(user.id, UserRole.DRIVER)
