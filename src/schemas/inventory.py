# src/schemas/inventory.py
from typing import Dict, Optional, List
from uuid import UUID
from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field, ConfigDict

from src.models.inventory import MovementType


# -------------------------------
# STOCK ROW SCHEMAS
# -------------------------------
class StockRowIn(BaseModel):
    """
    One (item, location) stock record as supplied by the caller.

    On replacement, ``id`` and ``version`` are the snapshot the caller last
    read for this location; leave both out to overwrite unconditionally.
    """
    id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    quantity_physical: Optional[int] = None
    quantity_available: Optional[int] = None
    quantity_reserved: int = 0
    reorder_level: int = Field(0, ge=0)
    max_stock_level: int = Field(0, ge=0)
    last_counted_at: Optional[datetime] = None
    version: Optional[int] = Field(None, ge=1)


class StockExpectation(BaseModel):
    """Snapshot of a live stock row the caller expects to still be current"""
    id: Optional[UUID] = None
    version: Optional[int] = Field(None, ge=1)


class StockLevelOut(BaseModel):
    id: UUID
    item_id: UUID
    location_id: UUID
    quantity_physical: int
    quantity_available: int
    quantity_reserved: int
    reorder_level: int
    max_stock_level: int
    last_counted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int

    model_config = ConfigDict(from_attributes=True)


# -------------------------------
# ITEM SCHEMAS
# -------------------------------
class ItemCreate(BaseModel):
    category_id: Optional[UUID] = None
    name: str = ""
    sku: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=50)
    weight: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit_price: int = 0
    cost_price: int = 0
    is_active: bool = True
    stock: List[StockRowIn] = []


class ItemReplace(BaseModel):
    """
    Full stock replacement plus a partial metadata update.

    Only fields present in the payload are applied; an explicit null clears
    an optional field. ``expected`` maps location id to the row snapshot
    last read there, which also covers rows left out of ``stock``.
    """
    category_id: Optional[UUID] = None
    name: Optional[str] = None
    sku: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=50)
    weight: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit_price: Optional[int] = None
    cost_price: Optional[int] = None
    is_active: Optional[bool] = None
    stock: List[StockRowIn] = Field(..., description="Complete replacement stock-row set")
    expected: Dict[UUID, StockExpectation] = Field(
        default_factory=dict,
        description="Location id -> snapshot of the row last read there"
    )


class ItemOut(BaseModel):
    id: UUID
    organization_id: UUID
    category_id: UUID
    sku: Optional[str] = None
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    weight: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit_price: int
    cost_price: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    stock: List[StockLevelOut] = Field(
        default_factory=list,
        validation_alias=AliasChoices("stock", "stock_levels")
    )

    model_config = ConfigDict(from_attributes=True)


# -------------------------------
# MOVEMENT SCHEMAS
# -------------------------------
class StockMovementOut(BaseModel):
    id: UUID
    item_id: UUID
    location_id: UUID
    movement_type: MovementType
    quantity: int
    reference_type: str
    reference_id: UUID
    reason: Optional[str] = None
    batch_id: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
