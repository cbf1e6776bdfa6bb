"""Initial schema - merchant settings and Kvikk shipment records

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'merchant_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('kvikk_api_key', sa.String(), nullable=True),
        sa.Column('default_service', sa.String(), nullable=False),
        sa.Column('auto_create_shipments', sa.Boolean(), nullable=False),
        sa.Column('sender_name', sa.String(), nullable=True),
        sa.Column('sender_address', sa.String(), nullable=True),
        sa.Column('sender_city', sa.String(), nullable=True),
        sa.Column('sender_postal_code', sa.String(), nullable=True),
        sa.Column('sender_country_code', sa.String(), nullable=True),
        sa.Column('sender_phone', sa.String(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_merchant_settings_shop_domain', 'merchant_settings', ['shop_domain'], unique=True)

    op.create_table(
        'kvikk_shipments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('order_number', sa.String(), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'CREATED', 'FAILED', name='shipmentstatus'), nullable=False),
        sa.Column('service_type', sa.String(), nullable=True),
        sa.Column('tracking_number', sa.String(), nullable=True),
        sa.Column('carrier_response', sa.JSON(), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shop_domain', 'order_id', name='uq_kvikk_shipments_shop_order'),
    )
    op.create_index('ix_kvikk_shipments_id', 'kvikk_shipments', ['id'], unique=False)
    op.create_index('ix_kvikk_shipments_shop_domain', 'kvikk_shipments', ['shop_domain'], unique=False)
    op.create_index('ix_kvikk_shipments_status', 'kvikk_shipments', ['status'], unique=False)
    op.create_index('ix_kvikk_shipments_tracking_number', 'kvikk_shipments', ['tracking_number'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_kvikk_shipments_tracking_number', table_name='kvikk_shipments')
    op.drop_index('ix_kvikk_shipments_status', table_name='kvikk_shipments')
    op.drop_index('ix_kvikk_shipments_shop_domain', table_name='kvikk_shipments')
    op.drop_index('ix_kvikk_shipments_id', table_name='kvikk_shipments')
    op.drop_table('kvikk_shipments')
    sa.Enum(name='shipmentstatus').drop(op.get_bind(), checkfirst=True)

    op.drop_index('ix_merchant_settings_shop_domain', table_name='merchant_settings')
    op.drop_table('merchant_settings')
