"""003: create orders and order_lines tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            status          VARCHAR(10)     NOT NULL DEFAULT 'ORDER',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_status CHECK (status IN ('ORDER', 'CANCEL'))
        );
    """)
    op.execute("CREATE INDEX idx_orders_user_created ON orders (user_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE order_lines (
            id              BIGSERIAL       PRIMARY KEY,
            order_id        BIGINT          NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
            product_id      BIGINT          NOT NULL REFERENCES products (id),
            quantity        INT             NOT NULL,
            line_total      BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_order_lines_quantity  CHECK (quantity > 0),
            CONSTRAINT ck_order_lines_total     CHECK (line_total >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_order_lines_order ON order_lines (order_id);")
    op.execute("COMMENT ON TABLE order_lines IS 'Order line items — line_total is price x quantity at purchase time';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_lines CASCADE;")
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
