"""create_realms_and_checkpoints

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:12:41.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('realms'):
        op.create_table('realms',
        sa.Column('pk', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('atomical_id', sa.String(length=100), nullable=False),
        sa.Column('atomical_number', sa.BigInteger(), nullable=False),
        sa.Column('mint_time', sa.BigInteger(), nullable=True),
        sa.Column('mint_address', sa.String(length=100), nullable=True),
        sa.Column('owner_address', sa.String(length=100), nullable=True),
        sa.Column('profile_pointer', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('pk')
        )
        op.create_index(op.f('ix_realms_name'), 'realms', ['name'], unique=True)
        op.create_index(op.f('ix_realms_atomical_id'), 'realms', ['atomical_id'], unique=False)
        op.create_index(op.f('ix_realms_atomical_number'), 'realms', ['atomical_number'], unique=False)
        op.create_index(op.f('ix_realms_owner_address'), 'realms', ['owner_address'], unique=False)

    if not inspector.has_table('sync_checkpoints'):
        op.create_table('sync_checkpoints',
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('key')
        )
        op.create_index(op.f('ix_sync_checkpoints_key'), 'sync_checkpoints', ['key'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('sync_checkpoints'):
        op.drop_index(op.f('ix_sync_checkpoints_key'), table_name='sync_checkpoints')
        op.drop_table('sync_checkpoints')

    if inspector.has_table('realms'):
        op.drop_index(op.f('ix_realms_owner_address'), table_name='realms')
        op.drop_index(op.f('ix_realms_atomical_number'), table_name='realms')
        op.drop_index(op.f('ix_realms_atomical_id'), table_name='realms')
        op.drop_index(op.f('ix_realms_name'), table_name='realms')
        op.drop_table('realms')
