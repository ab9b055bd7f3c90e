"""Integer bounds of the storage columns.

Values outside these ranges cannot be bound to a statement, so they are
rejected as invalid input before any SQL runs.
"""

INT4_MAX = 2**31 - 1
INT8_MAX = 2**63 - 1

# order_lines.quantity and products.stock_count are INT
MAX_LINE_QUANTITY = INT4_MAX
# BIGSERIAL primary keys
MAX_ROW_ID = INT8_MAX
# prices and line totals are BIGINT
MAX_AMOUNT = INT8_MAX
