"""add_credit_ledger_and_generated_entities

Revision ID: 4f1c2a9d7e10
Revises:
Create Date: 2026-10-19 09:12:41.530217

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Credit ledger
    op.create_table('credit_accounts',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('balance', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('balance >= 0', name='ck_credit_accounts_balance_non_negative'),
    )
    op.create_index(op.f('ix_credit_accounts_id'), 'credit_accounts', ['id'], unique=False)
    op.create_index(op.f('ix_credit_accounts_user_id'), 'credit_accounts', ['user_id'], unique=True)

    op.create_table('credit_reservations',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_credit_reservations_session_id'), 'credit_reservations', ['session_id'], unique=False)
    op.create_index(op.f('ix_credit_reservations_user_id'), 'credit_reservations', ['user_id'], unique=False)
    op.create_index(op.f('ix_credit_reservations_state'), 'credit_reservations', ['state'], unique=False)
    op.create_index(op.f('ix_credit_reservations_created_at'), 'credit_reservations', ['created_at'], unique=False)
    op.create_index('idx_credit_reservation_state_date', 'credit_reservations', ['state', 'created_at'], unique=False)

    op.create_table('credit_transactions',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        sa.Column('reservation_id', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_credit_transactions_id'), 'credit_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_credit_transactions_user_id'), 'credit_transactions', ['user_id'], unique=False)
    op.create_index(op.f('ix_credit_transactions_reservation_id'), 'credit_transactions', ['reservation_id'], unique=False)
    op.create_index(op.f('ix_credit_transactions_created_at'), 'credit_transactions', ['created_at'], unique=False)
    op.create_index('idx_credit_tx_user_date', 'credit_transactions', ['user_id', 'created_at'], unique=False)

    # Generated entities
    op.create_table('characters',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(length=50), nullable=True),
        sa.Column('species', sa.String(length=100), nullable=True),
        sa.Column('style', sa.String(length=30), nullable=False),
        sa.Column('physical_characteristics', sa.Text(), nullable=True),
        sa.Column('personality', sa.Text(), nullable=True),
        sa.Column('history', sa.Text(), nullable=True),
        sa.Column('age_rating', sa.String(length=20), nullable=False),
        sa.Column('visibility', sa.String(length=20), server_default='PRIVATE', nullable=False),
        sa.Column('avatar_image_key', sa.String(length=500), nullable=True),
        sa.Column('generation_session_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_characters_id'), 'characters', ['id'], unique=False)
    op.create_index(op.f('ix_characters_user_id'), 'characters', ['user_id'], unique=False)
    op.create_index(op.f('ix_characters_age_rating'), 'characters', ['age_rating'], unique=False)
    op.create_index(op.f('ix_characters_generation_session_id'), 'characters', ['generation_session_id'], unique=False)
    op.create_index('idx_characters_user_created', 'characters', ['user_id', 'created_at'], unique=False)

    op.create_table('stories',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('synopsis', sa.Text(), nullable=False),
        sa.Column('initial_text', sa.Text(), nullable=False),
        sa.Column('genre', sa.String(length=50), nullable=True),
        sa.Column('mood', sa.String(length=50), nullable=True),
        sa.Column('setting', sa.String(length=200), nullable=True),
        sa.Column('age_rating', sa.String(length=20), nullable=False),
        sa.Column('objectives', sa.JSON(), server_default='[]', nullable=False),
        sa.Column('characters', sa.JSON(), server_default='[]', nullable=False),
        sa.Column('tags', sa.JSON(), server_default='[]', nullable=False),
        sa.Column('content_tags', sa.JSON(), server_default='[]', nullable=False),
        sa.Column('cover_prompt', sa.Text(), nullable=True),
        sa.Column('cover_image_key', sa.String(length=500), nullable=True),
        sa.Column('visibility', sa.String(length=20), server_default='PUBLIC', nullable=False),
        sa.Column('generation_session_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_stories_id'), 'stories', ['id'], unique=False)
    op.create_index(op.f('ix_stories_user_id'), 'stories', ['user_id'], unique=False)
    op.create_index(op.f('ix_stories_age_rating'), 'stories', ['age_rating'], unique=False)
    op.create_index(op.f('ix_stories_generation_session_id'), 'stories', ['generation_session_id'], unique=False)
    op.create_index('idx_stories_user_created', 'stories', ['user_id', 'created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_stories_user_created', table_name='stories')
    op.drop_index(op.f('ix_stories_generation_session_id'), table_name='stories')
    op.drop_index(op.f('ix_stories_age_rating'), table_name='stories')
    op.drop_index(op.f('ix_stories_user_id'), table_name='stories')
    op.drop_index(op.f('ix_stories_id'), table_name='stories')
    op.drop_table('stories')

    op.drop_index('idx_characters_user_created', table_name='characters')
    op.drop_index(op.f('ix_characters_generation_session_id'), table_name='characters')
    op.drop_index(op.f('ix_characters_age_rating'), table_name='characters')
    op.drop_index(op.f('ix_characters_user_id'), table_name='characters')
    op.drop_index(op.f('ix_characters_id'), table_name='characters')
    op.drop_table('characters')

    op.drop_index('idx_credit_tx_user_date', table_name='credit_transactions')
    op.drop_index(op.f('ix_credit_transactions_created_at'), table_name='credit_transactions')
    op.drop_index(op.f('ix_credit_transactions_reservation_id'), table_name='credit_transactions')
    op.drop_index(op.f('ix_credit_transactions_user_id'), table_name='credit_transactions')
    op.drop_index(op.f('ix_credit_transactions_id'), table_name='credit_transactions')
    op.drop_table('credit_transactions')

    op.drop_index('idx_credit_reservation_state_date', table_name='credit_reservations')
    op.drop_index(op.f('ix_credit_reservations_created_at'), table_name='credit_reservations')
    op.drop_index(op.f('ix_credit_reservations_state'), table_name='credit_reservations')
    op.drop_index(op.f('ix_credit_reservations_user_id'), table_name='credit_reservations')
    op.drop_index(op.f('ix_credit_reservations_session_id'), table_name='credit_reservations')
    op.drop_table('credit_reservations')

    op.drop_index(op.f('ix_credit_accounts_user_id'), table_name='credit_accounts')
    op.drop_index(op.f('ix_credit_accounts_id'), table_name='credit_accounts')
    op.drop_table('credit_accounts')
