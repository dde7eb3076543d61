"""Initial portal schema

Revision ID: 202610190000
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '202610190000'
down_revision = None
branch_labels = None
depends_on = None


role_enum = postgresql.ENUM(
    'USER', 'EDITOR', 'JOURNALIST', 'OFFICIAL', 'MODERATOR', 'ADMIN',
    name='role_enum', create_type=False,
)
content_status_enum = postgresql.ENUM(
    'DRAFT', 'PUBLISHED', 'ARCHIVED',
    name='content_status_enum', create_type=False,
)
document_category_enum = postgresql.ENUM(
    'CONSTITUTION', 'LAW', 'CODE', 'DECREE', 'RESOLUTION', 'REGULATION', 'OTHER',
    name='document_category_enum', create_type=False,
)
document_classification_enum = postgresql.ENUM(
    'PUBLIC', 'INTERNAL', 'RESTRICTED',
    name='document_classification_enum', create_type=False,
)
member_status_enum = postgresql.ENUM(
    'ACTIVE', 'INACTIVE', 'BANNED',
    name='member_status_enum', create_type=False,
)

ENUMS = (
    role_enum,
    content_status_enum,
    document_category_enum,
    document_classification_enum,
    member_status_enum,
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _authored_content_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', content_status_enum, nullable=False, server_default='DRAFT'),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index(f'ix_{name}_author_id', name, ['author_id'])


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    # ------------------------------
    # Accounts
    # ------------------------------
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('failed_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role', role_enum, primary_key=True),
    )

    # ------------------------------
    # Documents
    # ------------------------------
    op.create_table(
        'documents',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('category', document_category_enum, nullable=False, server_default='OTHER'),
        sa.Column('classification', document_classification_enum, nullable=False, server_default='PUBLIC'),
        sa.Column('status', content_status_enum, nullable=False, server_default='DRAFT'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('version', sa.String(50), nullable=False, server_default='1.0'),
        sa.Column('effective_date', sa.Date(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_documents_slug', 'documents', ['slug'], unique=True)
    op.create_index('ix_documents_status', 'documents', ['status'])
    op.create_index('ix_documents_author_id', 'documents', ['author_id'])

    # ------------------------------
    # Member directory
    # ------------------------------
    op.create_table(
        'members',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('status', member_status_enum, nullable=False, server_default='ACTIVE'),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('place_of_birth', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('mobile_numbers', sa.JSON(), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('organization', sa.String(255), nullable=True),
        sa.Column('instagram', sa.String(255), nullable=True),
        sa.Column('github', sa.String(255), nullable=True),
        sa.Column('facebook', sa.String(255), nullable=True),
        sa.Column('x', sa.String(255), nullable=True),
        sa.Column('linkedin', sa.String(255), nullable=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index('ix_members_name', 'members', ['name'])

    # ------------------------------
    # Authored content
    # ------------------------------
    _authored_content_table('articles')
    _authored_content_table('news')


def downgrade() -> None:
    op.drop_table('news')
    op.drop_table('articles')
    op.drop_table('members')
    op.drop_table('documents')
    op.drop_table('user_roles')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
