# src/services/stock_coordinator.py
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID, uuid4
import logging

from sqlalchemy.orm import Session

from src.core.exceptions import (
    ConflictError, ForbiddenError, NotFoundException, ValidationError, VersionConflictError
)
from src.core.transactions import unit_of_work
from src.models.catalog import Category
from src.models.inventory import Item, MovementType, StockLevel, StockMovement
from src.models.locations import Location
from src.schemas.inventory import StockExpectation, StockRowIn
from src.services.stock_ledger import MovementLedger

logger = logging.getLogger(__name__)


class StockCoordinator:
    """
    Keeps an item and its per-location stock rows consistent.

    Every write runs as one unit of work: item row, stock rows and the
    movements describing them commit together or not at all. Stock rows are
    never written anywhere else.
    """

    # ================================
    # INPUT PREPARATION
    # ================================

    @staticmethod
    def prepare_rows(
        rows: Iterable[StockRowIn],
        require_positive_available: bool = False
    ) -> List[StockRowIn]:
        """
        Validate a stock-row set and fill in the derived quantity.

        Physical defaults to available + reserved; available defaults to
        physical - reserved. Runs without touching the database.
        """
        prepared = []
        seen = set()

        for row in rows:
            if row.location_id is None:
                raise ValidationError("location_id is required for stock entries")
            if row.location_id in seen:
                raise ConflictError(f"Duplicate stock entry for location {row.location_id}")
            seen.add(row.location_id)

            reserved = row.quantity_reserved
            physical = row.quantity_physical
            available = row.quantity_available

            if physical is None and available is None:
                raise ValidationError(
                    f"quantity_physical or quantity_available is required for location {row.location_id}"
                )
            if physical is None:
                physical = available + reserved
            if available is None:
                available = physical - reserved

            if reserved < 0:
                raise ValidationError("quantity_reserved cannot be negative")
            if physical < 0:
                raise ValidationError("quantity_physical cannot be negative")
            if available < 0:
                raise ValidationError("quantity_available cannot be negative")
            if require_positive_available and available <= 0:
                raise ValidationError("quantity_available must be greater than zero for stock entries")
            if reserved > physical:
                raise ValidationError(
                    f"quantity_reserved ({reserved}) cannot exceed quantity_physical ({physical})"
                )
            if available > physical:
                raise ValidationError(
                    f"quantity_available ({available}) cannot exceed quantity_physical ({physical})"
                )

            prepared.append(row.model_copy(update={
                "quantity_physical": physical,
                "quantity_available": available,
            }))

        return prepared

    # ================================
    # CREATE
    # ================================

    @staticmethod
    def create_with_stock(
        db: Session,
        item: Item,
        rows: Iterable[StockRowIn],
        actor_id: Optional[UUID] = None,
        timeout: Optional[float] = None
    ) -> Item:
        """Insert an item and its initial stock rows as one unit."""
        prepared = StockCoordinator.prepare_rows(rows)
        batch_id = uuid4().hex

        with unit_of_work(db, "create item", timeout):
            StockCoordinator._check_category(db, item.organization_id, item.category_id)
            StockCoordinator._check_sku(db, item.organization_id, item.sku)
            StockCoordinator._check_locations(db, item.organization_id, [r.location_id for r in prepared])

            now = datetime.now(timezone.utc)
            item.created_at = now
            item.updated_at = now
            db.add(item)
            db.flush()

            levels = [StockCoordinator._new_level(row, now) for row in prepared]
            item.stock_levels.extend(levels)
            db.flush()

            for level in levels:
                MovementLedger.append(db, StockMovement(
                    organization_id=item.organization_id,
                    item_id=item.id,
                    location_id=level.location_id,
                    movement_type=MovementType.INITIAL_STOCK,
                    quantity=level.quantity_physical,
                    reference_type="item_create",
                    reference_id=item.id,
                    batch_id=batch_id,
                    created_by=actor_id,
                ))

        logger.info(f"Item created: {item.id} with {len(prepared)} stock row(s)")
        return item

    # ================================
    # REPLACE
    # ================================

    @staticmethod
    def replace_stock(
        db: Session,
        item_id: UUID,
        rows: Iterable[StockRowIn],
        expected: Optional[Mapping[UUID, StockExpectation]] = None,
        organization_id: Optional[UUID] = None,
        item_changes: Optional[Dict[str, Any]] = None,
        actor_id: Optional[UUID] = None,
        reason: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> Item:
        """
        Swap an item's whole stock-row set for ``rows``.

        Expectations come from each row's ``id``/``version`` and from
        ``expected`` (location id -> StockExpectation), which can also name
        locations the new set drops. They are checked against the locked live
        rows before anything is deleted; a mismatch raises
        VersionConflictError and leaves the item untouched.
        """
        prepared = StockCoordinator.prepare_rows(rows)
        expectations = StockCoordinator._collect_expectations(prepared, expected)
        batch_id = uuid4().hex

        with unit_of_work(db, "replace item stock", timeout):
            item = db.query(Item).filter(Item.id == item_id).with_for_update().first()
            if not item:
                raise NotFoundException(f"Item {item_id} not found")
            if organization_id is not None and item.organization_id != organization_id:
                raise ForbiddenError(f"Item {item_id} belongs to another organization")

            current = db.query(StockLevel).filter(
                StockLevel.item_id == item.id
            ).with_for_update().all()
            live = {level.location_id: level for level in current}

            for location_id, (expected_id, expected_version) in expectations.items():
                level = live.get(location_id)
                stale = (
                    level is None
                    or (expected_version is not None and level.version != expected_version)
                    or (expected_id is not None and level.id != expected_id)
                )
                if stale:
                    logger.warning(
                        f"Version conflict on item {item.id} location {location_id}: "
                        f"expected id={expected_id} v{expected_version}, "
                        f"found {None if level is None else f'id={level.id} v{level.version}'}"
                    )
                    raise VersionConflictError(item.id, location_id)

            if item_changes:
                StockCoordinator._apply_item_changes(db, item, item_changes)

            StockCoordinator._check_locations(db, item.organization_id, [r.location_id for r in prepared])

            previous = {location_id: level.quantity_physical for location_id, level in live.items()}

            now = datetime.now(timezone.utc)
            item.stock_levels.clear()
            db.flush()

            levels = [StockCoordinator._new_level(row, now) for row in prepared]
            item.stock_levels.extend(levels)
            item.updated_at = now
            db.flush()

            for level in levels:
                old_physical = previous.get(level.location_id)
                if old_physical is None:
                    movement_type = MovementType.INITIAL_STOCK
                    delta = level.quantity_physical
                else:
                    movement_type = MovementType.REPLACEMENT
                    delta = level.quantity_physical - old_physical
                MovementLedger.append(db, StockMovement(
                    organization_id=item.organization_id,
                    item_id=item.id,
                    location_id=level.location_id,
                    movement_type=movement_type,
                    quantity=delta,
                    reference_type="item_replace",
                    reference_id=item.id,
                    reason=reason,
                    batch_id=batch_id,
                    created_by=actor_id,
                ))

            kept = {level.location_id for level in levels}
            for location_id, old_physical in previous.items():
                if location_id in kept:
                    continue
                MovementLedger.append(db, StockMovement(
                    organization_id=item.organization_id,
                    item_id=item.id,
                    location_id=location_id,
                    movement_type=MovementType.REMOVAL,
                    quantity=-old_physical,
                    reference_type="item_replace",
                    reference_id=item.id,
                    reason=reason,
                    batch_id=batch_id,
                    created_by=actor_id,
                ))

        logger.info(
            f"Stock replaced for item {item_id}: {len(previous)} row(s) -> {len(prepared)} row(s)"
        )
        return item

    # ================================
    # DELETE
    # ================================

    @staticmethod
    def delete_with_stock(
        db: Session,
        item_id: UUID,
        organization_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
        timeout: Optional[float] = None
    ) -> int:
        """Delete an item and its stock rows, keeping their history. Returns rows removed."""
        batch_id = uuid4().hex

        with unit_of_work(db, "delete item", timeout):
            item = db.query(Item).filter(Item.id == item_id).with_for_update().first()
            if not item:
                raise NotFoundException(f"Item {item_id} not found")
            if organization_id is not None and item.organization_id != organization_id:
                raise ForbiddenError(f"Item {item_id} belongs to another organization")

            levels = list(item.stock_levels)
            for level in levels:
                MovementLedger.append(db, StockMovement(
                    organization_id=item.organization_id,
                    item_id=item.id,
                    location_id=level.location_id,
                    movement_type=MovementType.REMOVAL,
                    quantity=-level.quantity_physical,
                    reference_type="item_delete",
                    reference_id=item.id,
                    batch_id=batch_id,
                    created_by=actor_id,
                ))

            db.delete(item)
            db.flush()

        logger.info(f"Item deleted: {item_id} with {len(levels)} stock row(s)")
        return len(levels)

    # ================================
    # HELPERS
    # ================================

    @staticmethod
    def _new_level(row: StockRowIn, now: datetime) -> StockLevel:
        return StockLevel(
            location_id=row.location_id,
            quantity_physical=row.quantity_physical,
            quantity_available=row.quantity_available,
            quantity_reserved=row.quantity_reserved,
            reorder_level=row.reorder_level,
            max_stock_level=row.max_stock_level,
            last_counted_at=row.last_counted_at,
            updated_at=now,
            version=1,
        )

    @staticmethod
    def _collect_expectations(
        rows: List[StockRowIn],
        expected: Optional[Mapping[UUID, StockExpectation]]
    ) -> Dict[UUID, tuple]:
        expectations = {
            row.location_id: (row.id, row.version)
            for row in rows
            if row.id is not None or row.version is not None
        }
        for location_id, snapshot in (expected or {}).items():
            row_id, row_version = expectations.get(location_id, (None, None))
            expectations[location_id] = (
                snapshot.id if snapshot.id is not None else row_id,
                snapshot.version if snapshot.version is not None else row_version,
            )
        return expectations

    @staticmethod
    def _apply_item_changes(db: Session, item: Item, changes: Dict[str, Any]) -> None:
        if "category_id" in changes and changes["category_id"] != item.category_id:
            StockCoordinator._check_category(db, item.organization_id, changes["category_id"])
        if "sku" in changes and changes["sku"] != item.sku:
            StockCoordinator._check_sku(db, item.organization_id, changes["sku"], exclude_id=item.id)

        for field, value in changes.items():
            setattr(item, field, value)

    @staticmethod
    def _check_category(db: Session, organization_id: UUID, category_id: UUID) -> None:
        category = db.query(Category).filter(
            Category.id == category_id,
            Category.organization_id == organization_id
        ).first()
        if not category:
            raise ValidationError(f"Category {category_id} not found in organization")

    @staticmethod
    def _check_sku(
        db: Session,
        organization_id: UUID,
        sku: Optional[str],
        exclude_id: Optional[UUID] = None
    ) -> None:
        if not sku:
            return
        query = db.query(Item.id).filter(
            Item.organization_id == organization_id,
            Item.sku == sku
        )
        if exclude_id is not None:
            query = query.filter(Item.id != exclude_id)
        if query.first():
            raise ConflictError(f"Item with SKU '{sku}' already exists")

    @staticmethod
    def _check_locations(db: Session, organization_id: UUID, location_ids: List[UUID]) -> None:
        if not location_ids:
            return
        found = {
            location_id
            for (location_id,) in db.query(Location.id).filter(
                Location.id.in_(location_ids),
                Location.organization_id == organization_id
            ).all()
        }
        missing = [str(location_id) for location_id in location_ids if location_id not in found]
        if missing:
            raise ValidationError(f"Unknown location(s) for organization: {', '.join(missing)}")
