"""Initial StudyPal schema: accounts, AI settings and key/value storage

Revision ID: 3f9c2a7d41b0
Revises:
Create Date: 2026-10-19 09:12:31.402117

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c2a7d41b0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    from sqlalchemy import inspect
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # db.create_all may already have built these on first start
    if 'user' not in existing_tables:
        op.create_table('user',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False),
            sa.Column('name', sa.String(length=80), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        with op.batch_alter_table('user', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_user_email'), ['email'], unique=True)

    if 'user_setting' not in existing_tables:
        op.create_table('user_setting',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('key', sa.String(length=100), nullable=False),
            sa.Column('value', sa.Text(), nullable=True),
            sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'key', name='uq_user_setting_user_key')
        )
        with op.batch_alter_table('user_setting', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_user_setting_user_id'), ['user_id'], unique=False)

    if 'storage_entry' not in existing_tables:
        op.create_table('storage_entry',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('namespace', sa.String(length=64), nullable=False),
            sa.Column('key', sa.String(length=100), nullable=False),
            sa.Column('value', sa.Text(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('namespace', 'key', name='uq_storage_entry_namespace_key')
        )
        with op.batch_alter_table('storage_entry', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_storage_entry_namespace'), ['namespace'], unique=False)


def downgrade():
    with op.batch_alter_table('storage_entry', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_storage_entry_namespace'))
    op.drop_table('storage_entry')

    with op.batch_alter_table('user_setting', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_setting_user_id'))
    op.drop_table('user_setting')

    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_email'))
    op.drop_table('user')
