"""files, tags and file_tags

Revision ID: 3f1c2a9d0b7e
Revises:
Create Date: 2026-10-18 14:20:03.118204

"""
from typing import Optional, Sequence, Union

from alembic import op
import sqlalchemy as sa

from tagger.common.settings import get_settings

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d0b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA: Optional[str] = get_settings().db_schema or None


def _ref(target: str) -> str:
    return f"{SCHEMA}.{target}" if SCHEMA else target


def upgrade() -> None:
    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('filename', sa.Text(), nullable=False),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('orphaned_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_files')),
        sa.UniqueConstraint('filename', name='uq_files_filename'),
        schema=SCHEMA,
    )
    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('slug', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tags')),
        sa.UniqueConstraint('slug', name='uq_tags_slug'),
        schema=SCHEMA,
    )
    op.create_index('ix_tags_name_lower', 'tags', [sa.literal_column('lower(name)')],
                    unique=False, schema=SCHEMA)

    # M:M link table; the pair is the key, both sides cascade
    op.create_table(
        'file_tags',
        sa.Column('file_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['file_id'], [_ref('files.id')],
                                name=op.f('fk_file_tags_file_id_files'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], [_ref('tags.id')],
                                name=op.f('fk_file_tags_tag_id_tags'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('file_id', 'tag_id', name=op.f('pk_file_tags')),
        schema=SCHEMA,
    )
    op.create_index('ix_file_tags_tag_id', 'file_tags', ['tag_id'], unique=False, schema=SCHEMA)


def downgrade() -> None:
    op.drop_index('ix_file_tags_tag_id', table_name='file_tags', schema=SCHEMA)
    op.drop_table('file_tags', schema=SCHEMA)

    op.drop_index('ix_tags_name_lower', table_name='tags', schema=SCHEMA)
    op.drop_table('tags', schema=SCHEMA)

    op.drop_table('files', schema=SCHEMA)
