"""002: create products table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE products (
            id              BIGSERIAL       PRIMARY KEY,
            name            VARCHAR(255)    NOT NULL,
            price           BIGINT          NOT NULL,
            stock_count     INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_products_price_gte_0  CHECK (price >= 0),
            CONSTRAINT ck_products_stock_gte_0  CHECK (stock_count >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_products_updated_at
            BEFORE UPDATE ON products
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE products IS 'Catalog items — stock_count is reserved by orders';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS products CASCADE;")
