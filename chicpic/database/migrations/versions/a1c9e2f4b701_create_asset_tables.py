"""Create garments, models and styled_looks tables.

Revision ID: a1c9e2f4b701
Revises:
Create Date: 2025-10-02 10:14:37.120418

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a1c9e2f4b701'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _stored_image() -> list[sa.Column]:
    return [
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('storage_path', sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    # ===========================================================================
    # TABLE: garments
    # ===========================================================================
    op.create_table(
        'garments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('category', sa.String(length=50), nullable=False),  # 'camiseta', 'pantalon', 'zapatos', etc.
        sa.Column('color', sa.String(length=100), nullable=True),
        sa.Column('available_sizes', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        *_stored_image(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_garments_category', 'garments', ['category'], unique=False)
    op.create_index('ix_garments_created_at', 'garments', ['created_at'], unique=False)

    # ===========================================================================
    # TABLE: models
    # ===========================================================================
    op.create_table(
        'models',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('characteristics', sa.Text(), nullable=False, server_default=''),
        sa.Column('gender', sa.String(length=20), nullable=False),
        sa.Column('age', sa.String(length=50), nullable=True),
        sa.Column('height', sa.String(length=50), nullable=True),
        sa.Column('body_type', sa.String(length=50), nullable=True),
        sa.Column('hair_color', sa.String(length=50), nullable=True),
        sa.Column('eye_color', sa.String(length=50), nullable=True),
        sa.Column('skin_tone', sa.String(length=50), nullable=True),
        # Tailles utilisées pour calculer l'ajustement des vêtements
        sa.Column('upper_body_size', sa.String(length=10), nullable=True),
        sa.Column('lower_body_size', sa.String(length=10), nullable=True),
        sa.Column('shoe_size', sa.String(length=10), nullable=True),
        *_stored_image(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_models_created_at', 'models', ['created_at'], unique=False)

    # ===========================================================================
    # TABLE: styled_looks
    # ===========================================================================
    op.create_table(
        'styled_looks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('model_id', sa.Uuid(), nullable=False),
        sa.Column('garment_ids', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('garment_fits', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        *_stored_image(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['model_id'], ['models.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_styled_looks_model_id', 'styled_looks', ['model_id'], unique=False)
    op.create_index('ix_styled_looks_created_at', 'styled_looks', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_styled_looks_created_at', table_name='styled_looks')
    op.drop_index('ix_styled_looks_model_id', table_name='styled_looks')
    op.drop_table('styled_looks')
    op.drop_index('ix_models_created_at', table_name='models')
    op.drop_table('models')
    op.drop_index('ix_garments_created_at', table_name='garments')
    op.drop_index('ix_garments_category', table_name='garments')
    op.drop_table('garments')
