import pytest
from protean.integrations.pytest import DomainFixture
from storefront.catalogue import reset_catalog, set_catalog
from storefront.catalogue.index import CatalogIndex
from storefront.payments.gateway import reset_gateway

# Small, fixed catalogue: p1/v1 costs exactly 10.0 so totals are easy to read.
CATALOGUE_RECORDS = [
    {
        "id": "p1",
        "name": "Luna Necklace",
        "price": 10.0,
        "category": "necklaces",
        "tags": ["gold"],
        "rating": 4.5,
        "variants": [
            {"id": "v1", "color": "Gold", "priceAdjustment": 0, "imageUrl": "/img/luna-gold.jpg"},
            {"id": "v2", "color": "Silver", "priceAdjustment": 2.5, "imageUrl": "/img/luna-silver.jpg"},
        ],
    },
    {
        "id": "p2",
        "name": "Aurora Ring",
        "price": 30.0,
        "category": "rings",
        "tags": ["silver"],
        "rating": 4.8,
        "variants": [
            {"id": "v1", "color": "Silver", "priceAdjustment": -5, "size": ["S", "M", "L"]},
        ],
    },
]


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def catalog():
    index = CatalogIndex.from_records(CATALOGUE_RECORDS)
    set_catalog(index)
    yield index
    reset_catalog()


@pytest.fixture(autouse=True)
def _reset_gateway():
    yield
    reset_gateway()
