"""initial_content_schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


CONTENT_TABLES = ('story', 'place', 'initiative')

SPECIFIC_COLUMNS = {
    'story': lambda: [
        sa.Column('audio_url', sa.Text(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
    ],
    'place': lambda: [
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('website_url', sa.Text(), nullable=True),
        sa.Column('opening_hours', sa.Text(), nullable=True),
    ],
    'initiative': lambda: [
        sa.Column('event_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('playlist_url', sa.Text(), nullable=True),
        sa.Column('event_url', sa.Text(), nullable=True),
    ],
}


def _common_columns():
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('main_image_url', sa.Text(), nullable=True),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('button_text', sa.String(length=255), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('location_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('tag'):
        op.create_table('tag',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_tag_external_id'), 'tag', ['external_id'], unique=True)

    for table in CONTENT_TABLES:
        if inspector.has_table(table):
            continue
        op.create_table(table,
        *_common_columns(),
        *SPECIFIC_COLUMNS[table](),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(f'ix_{table}_external_id', table, ['external_id'], unique=True)
        op.create_index(f'ix_{table}_slug', table, ['slug'], unique=False)
        op.create_index(f'ix_{table}_lat_lng', table, ['latitude', 'longitude'], unique=False)
        if table == 'initiative':
            op.create_index('ix_initiative_event_date', table, ['event_date'], unique=False)

    for table in CONTENT_TABLES:
        junction = f'{table}_tag'
        if inspector.has_table(junction):
            continue
        op.create_table(junction,
        sa.Column(f'{table}_id', sa.String(length=36), nullable=False),
        sa.Column('tag_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint([f'{table}_id'], [f'{table}.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tag.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint(f'{table}_id', 'tag_id')
        )
        op.create_index(op.f(f'ix_{junction}_tag_id'), junction, ['tag_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in CONTENT_TABLES:
        junction = f'{table}_tag'
        if inspector.has_table(junction):
            op.drop_table(junction)

    for table in CONTENT_TABLES:
        if inspector.has_table(table):
            op.drop_table(table)

    if inspector.has_table('tag'):
        op.drop_table('tag')
