import pytest

from src.core.config import Settings
from src.core.database import Base, build_engine, build_session_factory
import src.models  # noqa: F401
from src.models.catalog import Category
from src.models.inventory import StockLevel, StockMovement
from src.models.locations import Location
from src.models.organizations import Organization
from src.schemas.inventory import ItemCreate, StockRowIn


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        ENVIRONMENT="test",
        LOG_LEVEL="warning",
        _env_file=None,
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


def _seed_org(db, name):
    org = Organization(name=name)
    db.add(org)
    db.flush()
    category = Category(organization_id=org.id, name="General")
    l1 = Location(organization_id=org.id, name="Warehouse")
    l2 = Location(organization_id=org.id, name="Store")
    l3 = Location(organization_id=org.id, name="Backroom")
    db.add_all([category, l1, l2, l3])
    db.commit()
    return org, category, [l1, l2, l3]


@pytest.fixture
def org_a(db):
    return _seed_org(db, "Org A")


@pytest.fixture
def org_b(db):
    return _seed_org(db, "Org B")


@pytest.fixture
def org(org_a):
    return org_a[0]


@pytest.fixture
def category(org_a):
    return org_a[1]


@pytest.fixture
def locations(org_a):
    return org_a[2]


@pytest.fixture
def widget_data(category, locations):
    def build(name="Widget", sku=None, stock=None):
        if stock is None:
            stock = [StockRowIn(
                location_id=locations[0].id,
                quantity_physical=10,
                quantity_available=10,
                quantity_reserved=0,
            )]
        return ItemCreate(category_id=category.id, name=name, sku=sku, unit_price=250, stock=stock)
    return build


def movements_for(db, item_id):
    return db.query(StockMovement).filter(
        StockMovement.item_id == item_id
    ).order_by(StockMovement.created_at, StockMovement.id).all()


def stock_snapshot(db, item_id):
    rows = db.query(StockLevel).filter(StockLevel.item_id == item_id).all()
    return sorted(
        (str(r.location_id), str(r.id), r.quantity_physical, r.quantity_available,
         r.quantity_reserved, r.version)
        for r in rows
    )


def assert_quantity_invariants(db):
    for row in db.query(StockLevel).all():
        assert 0 <= row.quantity_reserved <= row.quantity_physical
        assert 0 <= row.quantity_available <= row.quantity_physical
