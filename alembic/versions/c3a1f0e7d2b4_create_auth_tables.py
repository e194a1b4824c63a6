"""create auth tables

Revision ID: c3a1f0e7d2b4
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c3a1f0e7d2b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema - Usuários, academias, vínculos e sessões."""

    # Tabela de Usuários
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('senha_hash', sa.String(length=255), nullable=True),
        sa.Column('google_id', sa.String(length=255), nullable=True),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('nome', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('profile_image_url', sa.String(length=500), nullable=True),
        sa.Column('user_type', sa.String(length=20), nullable=False, server_default='aluno'),
        sa.Column('gym_id', sa.String(length=255), nullable=True),
        sa.Column('active_gym_id', sa.String(length=255), nullable=True),
        sa.Column('password_reset_token', sa.String(length=64), nullable=True),
        sa.Column('password_reset_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_google_id', 'users', ['google_id'], unique=True)
    op.create_index('ix_users_password_reset_token', 'users', ['password_reset_token'], unique=True)
    op.create_index('ix_users_user_type', 'users', ['user_type'], unique=False)
    op.create_index('ix_users_gym_id', 'users', ['gym_id'], unique=False)

    # Tabela de Academias (tenants)
    op.create_table(
        'gyms',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('invite_code', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('max_members', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gyms_invite_code', 'gyms', ['invite_code'], unique=True)

    # Tabela de vínculos Usuário-Academia
    op.create_table(
        'user_gyms',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('gym_id', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['gym_id'], ['gyms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'gym_id', name='uq_user_gym'),
    )
    op.create_index('ix_user_gyms_id', 'user_gyms', ['id'], unique=False)
    op.create_index('ix_user_gyms_user_id', 'user_gyms', ['user_id'], unique=False)
    op.create_index('ix_user_gyms_gym_id', 'user_gyms', ['gym_id'], unique=False)
    op.create_index('ix_user_gyms_is_active', 'user_gyms', ['is_active'], unique=False)

    # Tabela de Sessões do servidor
    op.create_table(
        'sessions',
        sa.Column('sid', sa.String(length=255), nullable=False),
        sa.Column('dados', sa.JSON(), nullable=False),
        sa.Column('expire', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('sid'),
    )
    op.create_index('ix_sessions_expire', 'sessions', ['expire'], unique=False)


def downgrade() -> None:
    """Downgrade schema - Remove as tabelas de autenticação."""
    op.drop_index('ix_sessions_expire', table_name='sessions')
    op.drop_table('sessions')

    op.drop_index('ix_user_gyms_is_active', table_name='user_gyms')
    op.drop_index('ix_user_gyms_gym_id', table_name='user_gyms')
    op.drop_index('ix_user_gyms_user_id', table_name='user_gyms')
    op.drop_index('ix_user_gyms_id', table_name='user_gyms')
    op.drop_table('user_gyms')

    op.drop_index('ix_gyms_invite_code', table_name='gyms')
    op.drop_table('gyms')

    op.drop_index('ix_users_gym_id', table_name='users')
    op.drop_index('ix_users_user_type', table_name='users')
    op.drop_index('ix_users_password_reset_token', table_name='users')
    op.drop_index('ix_users_google_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
