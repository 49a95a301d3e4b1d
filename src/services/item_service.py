# src/services/item_service.py
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session, joinedload

from src.core.audit import audit_log
from src.core.exceptions import NotFoundException, ValidationError
from src.models.inventory import Item
from src.schemas.inventory import ItemCreate, ItemReplace
from src.services.item_query import ItemQueryService
from src.services.stock_coordinator import StockCoordinator

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("category_id", "name", "unit_price", "cost_price", "is_active")


class ItemService:
    """
    Item catalog: identity, metadata and the stock rows attached to an item.

    Writes that touch stock are handed to StockCoordinator; reads of many
    items go through ItemQueryService.
    """

    # ================================
    # VALIDATION
    # ================================

    @staticmethod
    def _validate_fields(fields: Dict[str, Any]) -> None:
        for field in REQUIRED_FIELDS:
            if field in fields and fields[field] is None:
                raise ValidationError(f"{field} cannot be null")

        if "name" in fields and not fields["name"].strip():
            raise ValidationError("name is required")
        if "unit_price" in fields and fields["unit_price"] < 0:
            raise ValidationError("unit_price cannot be negative")
        if "cost_price" in fields and fields["cost_price"] < 0:
            raise ValidationError("cost_price cannot be negative")
        for dimension in ("weight", "length", "width", "height"):
            if fields.get(dimension) is not None and fields[dimension] < 0:
                raise ValidationError(f"{dimension} cannot be negative")

    # ================================
    # WRITES
    # ================================

    @staticmethod
    def create_item(
        db: Session,
        organization_id: UUID,
        data: ItemCreate,
        actor_id: Optional[UUID] = None,
        timeout: Optional[float] = None
    ) -> Item:
        """Create an item together with its initial stock rows"""
        if organization_id is None:
            raise ValidationError("organization_id is required")

        fields = data.model_dump(exclude={"stock"})
        ItemService._validate_fields(fields)
        rows = StockCoordinator.prepare_rows(data.stock, require_positive_available=True)

        if fields.get("sku") == "":
            fields["sku"] = None

        item = Item(organization_id=organization_id, **fields)
        item = StockCoordinator.create_with_stock(db, item, rows, actor_id=actor_id, timeout=timeout)

        audit_log("item.create", "item", item.id, actor_id, {"stock_rows": len(rows)})
        return ItemService.get_item(db, item.id)

    @staticmethod
    def replace_item(
        db: Session,
        item_id: UUID,
        organization_id: UUID,
        data: ItemReplace,
        actor_id: Optional[UUID] = None,
        timeout: Optional[float] = None
    ) -> Item:
        """
        Apply the supplied metadata fields and replace the whole stock set.

        Fields absent from ``data`` keep their stored value. The metadata
        update and stock replacement commit together.
        """
        changes = data.model_dump(exclude_unset=True, exclude={"stock", "expected"})
        ItemService._validate_fields(changes)
        if changes.get("sku") == "":
            changes["sku"] = None
        rows = StockCoordinator.prepare_rows(data.stock)

        StockCoordinator.replace_stock(
            db,
            item_id,
            rows,
            expected=data.expected,
            organization_id=organization_id,
            item_changes=changes,
            actor_id=actor_id,
            timeout=timeout,
        )

        audit_log(
            "item.replace", "item", item_id, actor_id,
            {"fields": sorted(changes), "stock_rows": len(rows)}
        )
        return ItemService.get_item(db, item_id)

    @staticmethod
    def delete_item(
        db: Session,
        item_id: UUID,
        organization_id: UUID,
        actor_id: Optional[UUID] = None,
        timeout: Optional[float] = None
    ) -> None:
        removed = StockCoordinator.delete_with_stock(
            db, item_id, organization_id=organization_id, actor_id=actor_id, timeout=timeout
        )
        audit_log("item.delete", "item", item_id, actor_id, {"stock_rows": removed})

    # ================================
    # READS
    # ================================

    @staticmethod
    def get_item(db: Session, item_id: UUID, organization_id: Optional[UUID] = None) -> Item:
        """Get item with all current stock rows"""
        item = db.query(Item).options(
            joinedload(Item.stock_levels)
        ).filter(
            Item.id == item_id
        ).populate_existing().first()

        # other organizations' items are reported as missing
        if not item or (organization_id is not None and item.organization_id != organization_id):
            raise NotFoundException(f"Item {item_id} not found")

        return item

    @staticmethod
    def list_items(db: Session, organization_id: UUID, page: int = 1, page_size: int = 20) -> List[Item]:
        return ItemQueryService.list_by_organization(db, organization_id, page, page_size)

    @staticmethod
    def count_items(db: Session, organization_id: UUID) -> int:
        return ItemQueryService.count(db, organization_id)
