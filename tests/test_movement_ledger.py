import uuid
from datetime import datetime, timedelta, timezone
from itertools import islice

import pytest

from src.core.exceptions import NotFoundException, ValidationError
from src.models.inventory import MovementType, StockMovement
from src.services.stock_ledger import MovementLedger


def _append(db, org_id, item_id, quantity, movement_type=MovementType.ADJUSTMENT, created_at=None):
    movement = MovementLedger.append(db, StockMovement(
        created_at=created_at,
        organization_id=org_id,
        item_id=item_id,
        location_id=uuid.uuid4(),
        movement_type=movement_type,
        quantity=quantity,
        reference_type="manual",
        reference_id=uuid.uuid4(),
    ))
    return movement.id


class TestAppend:
    def test_append_stamps_timestamps_without_committing(self, db):
        org_id, item_id = uuid.uuid4(), uuid.uuid4()
        movement_id = _append(db, org_id, item_id, 5)

        movement = db.get(StockMovement, movement_id)
        assert movement.created_at is not None
        assert movement.updated_at == movement.created_at

        db.rollback()
        assert db.get(StockMovement, movement_id) is None


class TestIterForItem:
    @pytest.fixture
    def history(self, db):
        org_id, item_id = uuid.uuid4(), uuid.uuid4()
        start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        ids = [
            _append(db, org_id, item_id, quantity, created_at=start + timedelta(minutes=quantity))
            for quantity in range(1, 8)
        ]
        _append(db, org_id, uuid.uuid4(), 100)
        db.commit()
        return org_id, item_id, ids

    def test_time_ordered(self, db, history):
        _, item_id, ids = history
        movements = list(MovementLedger.iter_for_item(db, item_id, batch_size=3))
        assert [m.id for m in movements] == ids
        assert [m.quantity for m in movements] == list(range(1, 8))

    def test_lazy_batches(self, db, history):
        _, item_id, ids = history
        iterator = MovementLedger.iter_for_item(db, item_id, batch_size=2)
        assert [m.id for m in islice(iterator, 3)] == ids[:3]

    def test_restart_after_cursor(self, db, history):
        _, item_id, ids = history
        resumed = MovementLedger.iter_for_item(db, item_id, after=ids[2], batch_size=2)
        assert [m.id for m in resumed] == ids[3:]

    def test_restart_after_last_is_empty(self, db, history):
        _, item_id, ids = history
        assert list(MovementLedger.iter_for_item(db, item_id, after=ids[-1])) == []

    def test_unknown_cursor(self, db, history):
        _, item_id, _ = history
        with pytest.raises(NotFoundException):
            list(MovementLedger.iter_for_item(db, item_id, after=uuid.uuid4()))

    def test_cursor_from_other_organization_not_found(self, db, history):
        _, item_id, ids = history
        with pytest.raises(NotFoundException):
            list(MovementLedger.iter_for_item(db, item_id, organization_id=uuid.uuid4(), after=ids[2]))

    def test_invalid_batch_size(self, db, history):
        _, item_id, _ = history
        with pytest.raises(ValidationError):
            list(MovementLedger.iter_for_item(db, item_id, batch_size=0))

    def test_list_for_item_scoped_to_organization(self, db, history):
        org_id, item_id, ids = history
        assert [m.id for m in MovementLedger.list_for_item(db, item_id, org_id, limit=4)] == ids[:4]
        assert MovementLedger.list_for_item(db, item_id, uuid.uuid4()) == []
