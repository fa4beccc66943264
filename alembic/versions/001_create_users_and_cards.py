"""001: create users and payment_cards tables

Revision ID: 001
Revises: 
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.execute("""
        CREATE TABLE users (
            id              BIGINT          GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
            name            VARCHAR(255)    NOT NULL,
            surname         VARCHAR(255)    NOT NULL,
            birth_date      DATE,
            email           VARCHAR(255)    NOT NULL,
            active          BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email UNIQUE (email)
        );
    """)
    op.execute("CREATE INDEX idx_users_active ON users (active);")
    op.execute("CREATE INDEX idx_users_surname_name ON users (surname, name);")
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE payment_cards (
            id              BIGINT          GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
            user_id         BIGINT          NOT NULL,
            number          VARCHAR(19)     NOT NULL,
            holder          VARCHAR(255)    NOT NULL,
            expiration_date DATE            NOT NULL,
            active          BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payment_cards_number UNIQUE (number),
            CONSTRAINT fk_payment_cards_user FOREIGN KEY (user_id)
                REFERENCES users (id) ON DELETE CASCADE,
            CONSTRAINT ck_payment_cards_number_digits CHECK (number ~ '^[0-9]{13,19}$')
        );
    """)
    op.execute("CREATE INDEX idx_payment_cards_user_id ON payment_cards (user_id);")
    op.execute("CREATE INDEX idx_payment_cards_active ON payment_cards (active);")
    op.execute("""
        CREATE TRIGGER trg_payment_cards_updated_at
            BEFORE UPDATE ON payment_cards
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE payment_cards IS 'Payment cards; at most MAX_CARDS_PER_USER per user';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_cards CASCADE;")
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
