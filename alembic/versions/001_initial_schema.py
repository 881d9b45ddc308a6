"""Initial schema: users, shows catalog, memberships, bets.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            username VARCHAR(50) NOT NULL UNIQUE,
            email VARCHAR(255) NOT NULL UNIQUE,
            password_hash VARCHAR(256) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            last_login TIMESTAMPTZ
        )
    """)

    # --- Shows ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS shows (
            id SERIAL PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            description VARCHAR(1000) NOT NULL DEFAULT '',
            image_url TEXT,
            currency_name VARCHAR(50) NOT NULL DEFAULT 'Coins',
            currency_symbol VARCHAR(10) NOT NULL DEFAULT '🪙',
            initial_balance NUMERIC(18, 2) NOT NULL DEFAULT 1000,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Seasons ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS seasons (
            id SERIAL PRIMARY KEY,
            show_id INTEGER NOT NULL REFERENCES shows(id) ON DELETE CASCADE,
            season_number INTEGER NOT NULL,
            name VARCHAR(200) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Episodes ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS episodes (
            id SERIAL PRIMARY KEY,
            season_id INTEGER NOT NULL REFERENCES seasons(id) ON DELETE CASCADE,
            episode_number INTEGER NOT NULL,
            title VARCHAR(200) NOT NULL,
            air_date TIMESTAMPTZ,
            is_betting_open BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Characters ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS characters (
            id SERIAL PRIMARY KEY,
            show_id INTEGER NOT NULL REFERENCES shows(id) ON DELETE CASCADE,
            name VARCHAR(200) NOT NULL,
            actor VARCHAR(200),
            image_url TEXT,
            status VARCHAR(20) NOT NULL DEFAULT 'alive',
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_characters_show_status
        ON characters(show_id, status)
    """)

    # --- Memberships ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS memberships (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            show_id INTEGER NOT NULL REFERENCES shows(id) ON DELETE CASCADE,
            balance NUMERIC(18, 2) NOT NULL,
            joined_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_memberships_user_show UNIQUE (user_id, show_id)
        )
    """)

    # --- Bets ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS bets (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            character_id INTEGER NOT NULL REFERENCES characters(id) ON DELETE RESTRICT,
            episode_id INTEGER NOT NULL REFERENCES episodes(id) ON DELETE RESTRICT,
            amount NUMERIC(18, 2) NOT NULL CHECK (amount > 0),
            prediction VARCHAR(16) NOT NULL CHECK (prediction IN ('dies', 'survives')),
            status VARCHAR(16) NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'won', 'lost', 'refunded')),
            placed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            resolved_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_bets_user_episode
        ON bets(user_id, episode_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_bets_episode_status
        ON bets(episode_id, status)
    """)


def downgrade() -> None:
    for table in ["bets", "memberships", "characters", "episodes", "seasons", "shows", "users"]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")  # noqa: S608
