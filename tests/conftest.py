import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed(request):
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Push the domain context for each test and drop all stored data afterwards."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Core wiring
# ---------------------------------------------------------------------------
class RecordingNotifier:
    """Order notifier that keeps every confirmation it is handed."""

    def __init__(self, fail=False):
        self.confirmations = []
        self.fail = fail

    def order_placed(self, confirmation):
        self.confirmations.append(confirmation)
        if self.fail:
            raise ConnectionError("mail relay unreachable")


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def shop(notifier):
    from storefront.domain import storefront
    from storefront.services import Storefront

    return Storefront(storefront, notifier=notifier)


@pytest.fixture()
def store(shop):
    return shop.store


@pytest.fixture()
def make_product(store):
    from storefront.catalogue.product import Product

    def _make(name="Widget", price=10.0, stock=10):
        return store.add(Product.create(name=name, price=price, stock=stock))

    return _make


@pytest.fixture()
def make_promotion(shop):
    from datetime import UTC, datetime, timedelta

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        now = datetime.now(UTC)
        fields = {
            "name": "Test Promotion",
            "code": f"PROMO{counter['n']}",
            "discount_type": "percentage",
            "discount_value": 10.0,
            "starts_at": now - timedelta(days=1),
            "ends_at": now + timedelta(days=1),
        }
        fields.update(overrides)
        return shop.promotions.create(**fields)

    return _make
