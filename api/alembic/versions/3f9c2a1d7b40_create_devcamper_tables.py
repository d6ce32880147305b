"""create users, bootcamps, courses and reviews tables

Revision ID: 3f9c2a1d7b40
Revises:
Create Date: 2026-10-18 09:12:44.318204

"""
from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision = '3f9c2a1d7b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('role', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'bootcamps',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('slug', sqlmodel.sql.sqltypes.AutoString(length=60), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column('website', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('formatted_address', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('street', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column('state', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('zipcode', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('country', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column('careers', sa.JSON(), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('average_cost', sa.Integer(), nullable=True),
        sa.Column('photo', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('housing', sa.Boolean(), nullable=False),
        sa.Column('job_assistance', sa.Boolean(), nullable=False),
        sa.Column('job_guarantee', sa.Boolean(), nullable=False),
        sa.Column('accept_gi', sa.Boolean(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_bootcamps_slug', 'bootcamps', ['slug'])

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('weeks', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('tuition', sa.Float(), nullable=False),
        sa.Column('minimum_skill', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('scholarship_available', sa.Boolean(), nullable=False),
        sa.Column('bootcamp_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['bootcamp_id'], ['bootcamps.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('text', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('bootcamp_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['bootcamp_id'], ['bootcamps.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('bootcamp_id', 'user_id', name='uq_reviews_bootcamp_user'),
    )


def downgrade() -> None:
    op.drop_table('reviews')
    op.drop_table('courses')
    op.drop_index('ix_bootcamps_slug', table_name='bootcamps')
    op.drop_table('bootcamps')
    op.drop_table('users')
