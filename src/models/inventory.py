import uuid
import enum
from sqlalchemy import (
    Column, Integer, Float, String, Text, Boolean, DateTime, ForeignKey, Enum,
    UniqueConstraint, CheckConstraint, Index, Uuid, func
)
from sqlalchemy.orm import relationship
from src.core.database import Base


# ---------------- ENUMS ----------------

class MovementType(str, enum.Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    ADJUSTMENT = "adjustment"
    INITIAL_STOCK = "initial_stock"
    REPLACEMENT = "replacement"
    REMOVAL = "removal"


# ---------------- ITEM ----------------

class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        # NULL skus never collide
        UniqueConstraint("organization_id", "sku", name="uq_items_org_sku"),
        Index("ix_items_org_created", "organization_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False, index=True)

    sku = Column(String(120), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(50), nullable=True)

    weight = Column(Float, nullable=True)
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)

    # minor currency units
    unit_price = Column(Integer, nullable=False, default=0)
    cost_price = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="items")
    stock_levels = relationship(
        "StockLevel",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="StockLevel.location_id"
    )

    def __repr__(self):
        return f"<Item {self.name}>"


# ---------------- STOCK LEVEL ----------------

class StockLevel(Base):
    __tablename__ = "stock_levels"
    __table_args__ = (
        UniqueConstraint("item_id", "location_id", name="uq_stock_levels_item_location"),
        CheckConstraint("quantity_physical >= 0", name="ck_stock_levels_physical_non_negative"),
        CheckConstraint("quantity_reserved >= 0", name="ck_stock_levels_reserved_non_negative"),
        CheckConstraint("quantity_available >= 0", name="ck_stock_levels_available_non_negative"),
        CheckConstraint("quantity_reserved <= quantity_physical", name="ck_stock_levels_reserved_le_physical"),
        CheckConstraint("quantity_available <= quantity_physical", name="ck_stock_levels_available_le_physical"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    item_id = Column(
        Uuid,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False, index=True)

    quantity_physical = Column(Integer, nullable=False, default=0)
    quantity_available = Column(Integer, nullable=False, default=0)
    quantity_reserved = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=0)
    max_stock_level = Column(Integer, nullable=False, default=0)

    last_counted_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    version = Column(Integer, nullable=False, default=1)

    item = relationship("Item", back_populates="stock_levels")
    location = relationship("Location")

    def __repr__(self):
        return f"<StockLevel item={self.item_id} location={self.location_id} v{self.version}>"


# ---------------- STOCK MOVEMENT ----------------

class StockMovement(Base):
    """
    Append-only audit trail of stock quantity changes.

    item_id and location_id carry no foreign keys so history survives
    deletion of the item it describes.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        Index("ix_stock_movements_item_created", "item_id", "created_at", "id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, nullable=False, index=True)
    item_id = Column(Uuid, nullable=False)
    location_id = Column(Uuid, nullable=False, index=True)

    movement_type = Column(Enum(MovementType), nullable=False)
    quantity = Column(Integer, nullable=False)  # signed delta

    reference_type = Column(String(50), nullable=False)
    reference_id = Column(Uuid, nullable=False)
    reason = Column(Text, nullable=True)
    batch_id = Column(String(64), nullable=True, index=True)

    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<StockMovement {self.movement_type} {self.quantity:+d}>"
