# src/services/stock_ledger.py
from datetime import datetime, timezone
from itertools import islice
from typing import Iterator, List, Optional
from uuid import UUID
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from src.core.exceptions import NotFoundException, ValidationError
from src.models.inventory import StockMovement

logger = logging.getLogger(__name__)


class MovementLedger:
    """
    Append-only log of stock quantity changes.

    The ledger never commits: every append joins the caller's open
    transaction and is rolled back with it.
    """

    @staticmethod
    def append(db: Session, movement: StockMovement) -> StockMovement:
        now = datetime.now(timezone.utc)
        if movement.created_at is None:
            movement.created_at = now
        if movement.updated_at is None:
            movement.updated_at = movement.created_at

        db.add(movement)
        db.flush()

        logger.debug(
            f"Movement {movement.movement_type.value} {movement.quantity:+d} "
            f"for item {movement.item_id} at location {movement.location_id}"
        )
        return movement

    @staticmethod
    def iter_for_item(
        db: Session,
        item_id: UUID,
        organization_id: Optional[UUID] = None,
        after: Optional[UUID] = None,
        batch_size: int = 100
    ) -> Iterator[StockMovement]:
        """
        Yield an item's movements oldest first, fetching lazily in batches.

        Pass the id of the last movement seen as ``after`` to resume.
        """
        if batch_size < 1:
            raise ValidationError("batch_size must be at least 1")

        cursor = None
        if after is not None:
            anchor = db.get(StockMovement, after)
            if (
                not anchor
                or anchor.item_id != item_id
                or (organization_id is not None and anchor.organization_id != organization_id)
            ):
                raise NotFoundException(f"Movement {after} not found for item {item_id}")
            cursor = (anchor.created_at, anchor.id)

        while True:
            query = db.query(StockMovement).filter(StockMovement.item_id == item_id)
            if organization_id is not None:
                query = query.filter(StockMovement.organization_id == organization_id)
            if cursor is not None:
                created_at, movement_id = cursor
                query = query.filter(
                    or_(
                        StockMovement.created_at > created_at,
                        and_(
                            StockMovement.created_at == created_at,
                            StockMovement.id > movement_id
                        )
                    )
                )

            batch = query.order_by(
                StockMovement.created_at.asc(), StockMovement.id.asc()
            ).limit(batch_size).all()

            yield from batch

            if len(batch) < batch_size:
                return
            cursor = (batch[-1].created_at, batch[-1].id)

    @staticmethod
    def list_for_item(
        db: Session,
        item_id: UUID,
        organization_id: UUID,
        after: Optional[UUID] = None,
        limit: int = 50
    ) -> List[StockMovement]:
        movements = MovementLedger.iter_for_item(
            db, item_id, organization_id=organization_id, after=after, batch_size=limit
        )
        return list(islice(movements, limit))
