# src/services/item_query.py
from typing import List
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from src.core.exceptions import ValidationError
from src.models.inventory import Item


class ItemQueryService:
    """Read side: item listings with their stock rows attached."""

    @staticmethod
    def list_by_organization(
        db: Session,
        organization_id: UUID,
        page: int = 1,
        page_size: int = 20
    ) -> List[Item]:
        """
        Newest items first, each with its full stock-row set.

        Pages are 1-based. Items and rows come back from one joined
        statement so a concurrent replacement is never seen half-applied.
        """
        if page < 1:
            raise ValidationError("page must be at least 1")
        if page_size < 1:
            raise ValidationError("page_size must be at least 1")

        offset = (page - 1) * page_size

        return db.query(Item).options(
            joinedload(Item.stock_levels)
        ).filter(
            Item.organization_id == organization_id
        ).order_by(
            Item.created_at.desc(), Item.id.desc()
        ).offset(offset).limit(page_size).all()

    @staticmethod
    def count(db: Session, organization_id: UUID) -> int:
        return db.query(func.count(Item.id)).filter(
            Item.organization_id == organization_id
        ).scalar() or 0

    @staticmethod
    def total_pages(total: int, page_size: int) -> int:
        if page_size < 1:
            return 0
        return (total + page_size - 1) // page_size
