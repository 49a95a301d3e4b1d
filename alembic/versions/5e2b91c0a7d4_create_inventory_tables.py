"""create inventory tables

Revision ID: 5e2b91c0a7d4
Revises:
Create Date: 2026-10-19 09:12:44.120511

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5e2b91c0a7d4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


movement_type = sa.Enum(
    'INBOUND', 'OUTBOUND', 'ADJUSTMENT', 'INITIAL_STOCK', 'REPLACEMENT', 'REMOVAL',
    name='movementtype'
)


def upgrade():
    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('organization_id', 'name', name='uq_categories_org_name'),
    )
    op.create_index('ix_categories_organization_id', 'categories', ['organization_id'])

    op.create_table(
        'locations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('organization_id', 'name', name='uq_locations_org_name'),
    )
    op.create_index('ix_locations_organization_id', 'locations', ['organization_id'])

    op.create_table(
        'items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('sku', sa.String(120)),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('color', sa.String(50)),
        sa.Column('weight', sa.Float()),
        sa.Column('length', sa.Float()),
        sa.Column('width', sa.Float()),
        sa.Column('height', sa.Float()),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('cost_price', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('organization_id', 'sku', name='uq_items_org_sku'),
    )
    op.create_index('ix_items_organization_id', 'items', ['organization_id'])
    op.create_index('ix_items_category_id', 'items', ['category_id'])
    op.create_index('ix_items_org_created', 'items', ['organization_id', 'created_at'])

    op.create_table(
        'stock_levels',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('item_id', sa.Uuid(), sa.ForeignKey('items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', sa.Uuid(), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('quantity_physical', sa.Integer(), nullable=False),
        sa.Column('quantity_available', sa.Integer(), nullable=False),
        sa.Column('quantity_reserved', sa.Integer(), nullable=False),
        sa.Column('reorder_level', sa.Integer(), nullable=False),
        sa.Column('max_stock_level', sa.Integer(), nullable=False),
        sa.Column('last_counted_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.UniqueConstraint('item_id', 'location_id', name='uq_stock_levels_item_location'),
        sa.CheckConstraint('quantity_physical >= 0', name='ck_stock_levels_physical_non_negative'),
        sa.CheckConstraint('quantity_reserved >= 0', name='ck_stock_levels_reserved_non_negative'),
        sa.CheckConstraint('quantity_available >= 0', name='ck_stock_levels_available_non_negative'),
        sa.CheckConstraint('quantity_reserved <= quantity_physical', name='ck_stock_levels_reserved_le_physical'),
        sa.CheckConstraint('quantity_available <= quantity_physical', name='ck_stock_levels_available_le_physical'),
    )
    op.create_index('ix_stock_levels_item_id', 'stock_levels', ['item_id'])
    op.create_index('ix_stock_levels_location_id', 'stock_levels', ['location_id'])

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), nullable=False),
        sa.Column('item_id', sa.Uuid(), nullable=False),
        sa.Column('location_id', sa.Uuid(), nullable=False),
        sa.Column('movement_type', movement_type, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=False),
        sa.Column('reference_id', sa.Uuid(), nullable=False),
        sa.Column('reason', sa.Text()),
        sa.Column('batch_id', sa.String(64)),
        sa.Column('created_by', sa.Uuid()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_stock_movements_organization_id', 'stock_movements', ['organization_id'])
    op.create_index('ix_stock_movements_location_id', 'stock_movements', ['location_id'])
    op.create_index('ix_stock_movements_batch_id', 'stock_movements', ['batch_id'])
    op.create_index('ix_stock_movements_item_created', 'stock_movements', ['item_id', 'created_at', 'id'])


def downgrade():
    op.drop_table('stock_movements')
    movement_type.drop(op.get_bind(), checkfirst=True)
    op.drop_table('stock_levels')
    op.drop_table('items')
    op.drop_table('locations')
    op.drop_table('categories')
    op.drop_table('organizations')
