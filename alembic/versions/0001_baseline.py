"""Baseline migration - cases, messages, photos, webhook deliveries

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create case tables."""

    # ==========================================================================
    # Cases
    # ==========================================================================
    op.create_table(
        'cases',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('owner_id', sa.String(255), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('status', sa.String(20), server_default=sa.text("'new'"), nullable=False),
        sa.Column('category', sa.String(30), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_cases_owner_created', 'cases', ['owner_id', 'created_at'])
    op.create_index('idx_cases_status', 'cases', ['status'])

    # ==========================================================================
    # Messages (append-only)
    # ==========================================================================
    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'case_id', sa.Uuid(),
            sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('sender_type', sa.String(20), nullable=False),
        sa.Column('sender_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_messages_case_created', 'messages', ['case_id', 'created_at'])

    # ==========================================================================
    # Photos
    # ==========================================================================
    op.create_table(
        'case_photos',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'case_id', sa.Uuid(),
            sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'message_id', sa.Uuid(),
            sa.ForeignKey('messages.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('photo_url', sa.String(1024), nullable=False),
        sa.Column('storage_key', sa.String(512), nullable=True),
        sa.Column('content_type', sa.String(100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_case_photos_case', 'case_photos', ['case_id'])
    op.create_index('idx_case_photos_message', 'case_photos', ['message_id'])

    # ==========================================================================
    # Inbound webhook de-duplication
    # ==========================================================================
    op.create_table(
        'webhook_deliveries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('idempotency_key', sa.String(255), nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('case_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('idempotency_key', name='uq_webhook_deliveries_idempotency_key'),
    )


def downgrade() -> None:
    op.drop_table('webhook_deliveries')
    op.drop_index('idx_case_photos_message', table_name='case_photos')
    op.drop_index('idx_case_photos_case', table_name='case_photos')
    op.drop_table('case_photos')
    op.drop_index('idx_messages_case_created', table_name='messages')
    op.drop_table('messages')
    op.drop_index('idx_cases_status', table_name='cases')
    op.drop_index('idx_cases_owner_created', table_name='cases')
    op.drop_table('cases')
