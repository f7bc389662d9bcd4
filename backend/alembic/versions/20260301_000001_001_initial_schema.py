"""Initial schema: users, catalog, humidor and listings

Revision ID: 001
Revises:
Create Date: 2026-03-01 00:00:01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Members
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('region', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    # Catalog
    op.create_table(
        'brands',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(220), nullable=False),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('founded', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_brands'),
        sa.UniqueConstraint('slug', name='uq_brands_slug'),
    )
    op.create_index('ix_brands_name', 'brands', ['name'], unique=False)

    op.create_table(
        'lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('brand_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(220), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('release_year', sa.Integer(), nullable=True),
        sa.Column('discontinued', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id'], ondelete='CASCADE', name='fk_lines_brand_id_brands'),
        sa.PrimaryKeyConstraint('id', name='pk_lines'),
        sa.UniqueConstraint('brand_id', 'slug', name='uq_lines_brand_slug'),
    )
    op.create_index('ix_lines_brand_id', 'lines', ['brand_id'], unique=False)

    op.create_table(
        'cigars',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('line_id', sa.Integer(), nullable=False),
        sa.Column('vitola', sa.String(100), nullable=False),
        sa.Column('ring_gauge', sa.Integer(), nullable=True),
        sa.Column('length_inches', sa.Float(), nullable=True),
        sa.Column('length_mm', sa.Integer(), nullable=True),
        sa.Column('wrapper', sa.String(100), nullable=True),
        sa.Column('binder', sa.String(100), nullable=True),
        sa.Column('filler', sa.String(255), nullable=True),
        sa.Column('filler_tobaccos', sa.JSON(), nullable=False),
        sa.Column('strength', sa.String(20), nullable=True),
        sa.Column('body', sa.String(20), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('factory', sa.String(200), nullable=True),
        sa.Column('msrp_cents', sa.Integer(), nullable=True),
        sa.Column('typical_street_cents', sa.Integer(), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('avg_rating', sa.Float(), nullable=True),
        sa.Column('total_ratings', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['line_id'], ['lines.id'], ondelete='CASCADE', name='fk_cigars_line_id_lines'),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ondelete='SET NULL', name='fk_cigars_created_by_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_cigars'),
    )
    op.create_index('ix_cigars_line_id', 'cigars', ['line_id'], unique=False)
    op.create_index('ix_cigars_vitola', 'cigars', ['vitola'], unique=False)
    op.create_index('ix_cigars_line_vitola', 'cigars', ['line_id', 'vitola'], unique=False)

    # Humidor ledger
    op.create_table(
        'humidor_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('cigar_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('smoked_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('available_for_sale', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('available_for_trade', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('purchase_price_cents', sa.Integer(), nullable=True),
        sa.Column('purchase_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('acquired_from', sa.String(255), nullable=True),
        sa.Column('last_smoked_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('condition', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='fk_humidor_items_user_id_users'),
        sa.ForeignKeyConstraint(['cigar_id'], ['cigars.id'], ondelete='CASCADE', name='fk_humidor_items_cigar_id_cigars'),
        sa.PrimaryKeyConstraint('id', name='pk_humidor_items'),
        sa.CheckConstraint('quantity >= 0', name='ck_humidor_items_quantity_non_negative'),
        sa.CheckConstraint('smoked_count >= 0', name='ck_humidor_items_smoked_count_non_negative'),
        sa.CheckConstraint(
            'available_for_sale >= 0 AND available_for_trade >= 0',
            name='ck_humidor_items_reservations_non_negative',
        ),
        sa.CheckConstraint(
            'available_for_sale + available_for_trade <= quantity',
            name='ck_humidor_items_reservations_within_quantity',
        ),
    )
    op.create_index('ix_humidor_items_user_id', 'humidor_items', ['user_id'], unique=False)
    op.create_index('ix_humidor_items_cigar_id', 'humidor_items', ['cigar_id'], unique=False)
    op.create_index('ix_humidor_items_user_cigar', 'humidor_items', ['user_id', 'cigar_id'], unique=False)

    # Marketplace
    op.create_table(
        'listings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('cigar_id', sa.Integer(), nullable=True),
        sa.Column('humidor_item_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(3), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='DRAFT'),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('condition', sa.String(50), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('region', sa.String(100), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('meet_up_only', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('will_ship', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sold_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='fk_listings_user_id_users'),
        sa.ForeignKeyConstraint(['cigar_id'], ['cigars.id'], ondelete='SET NULL', name='fk_listings_cigar_id_cigars'),
        sa.ForeignKeyConstraint(
            ['humidor_item_id'], ['humidor_items.id'], ondelete='SET NULL',
            name='fk_listings_humidor_item_id_humidor_items',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_listings'),
        sa.CheckConstraint('qty > 0', name='ck_listings_qty_positive'),
        sa.CheckConstraint(
            "type <> 'WTS' OR (price_cents IS NOT NULL AND price_cents > 0)",
            name='ck_listings_wts_requires_price',
        ),
    )
    op.create_index('ix_listings_user_id', 'listings', ['user_id'], unique=False)
    op.create_index('ix_listings_cigar_id', 'listings', ['cigar_id'], unique=False)
    op.create_index('ix_listings_humidor_item_id', 'listings', ['humidor_item_id'], unique=False)
    op.create_index('ix_listings_type', 'listings', ['type'], unique=False)
    op.create_index('ix_listings_status', 'listings', ['status'], unique=False)
    op.create_index('ix_listings_region', 'listings', ['region'], unique=False)
    op.create_index('ix_listings_status_published', 'listings', ['status', 'published_at'], unique=False)


def downgrade() -> None:
    op.drop_table('listings')
    op.drop_table('humidor_items')
    op.drop_table('cigars')
    op.drop_table('lines')
    op.drop_table('brands')
    op.drop_table('users')
