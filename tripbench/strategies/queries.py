"""
SQL text shared by the strategy executors.

Every statement binds the order identifier as the named parameter `id`.
Selected column names equal the record field names in `tripbench.domain.models`.
No ORDER BY: items and payments come back in whatever order the store returns.
"""

from __future__ import annotations

ORDER_SQL = "SELECT order_id, order_date, customer_name FROM orders WHERE order_id = %(id)s"

ITEMS_SQL = (
    "SELECT product_name, quantity, unit_price FROM order_items WHERE order_id = %(id)s"
)

SHIPPING_SQL = (
    "SELECT address, city, postal_code, country FROM shipping_details WHERE order_id = %(id)s"
)

PAYMENTS_SQL = (
    "SELECT payment_date, amount, payment_method FROM payments WHERE order_id = %(id)s"
)

# Submission order is also the order the result sets are read back in.
MULTI_SQL = ";\n".join([ORDER_SQL, ITEMS_SQL, SHIPPING_SQL, PAYMENTS_SQL]) + ";"

JOIN_SQL = """
SELECT
    o.order_id, o.order_date, o.customer_name,
    i.product_name, i.quantity, i.unit_price,
    s.address, s.city, s.postal_code, s.country,
    p.payment_date, p.amount, p.payment_method
FROM orders o
LEFT JOIN order_items i      ON o.order_id = i.order_id
LEFT JOIN shipping_details s ON o.order_id = s.order_id
LEFT JOIN payments p         ON o.order_id = p.order_id
WHERE o.order_id = %(id)s
"""

__all__ = [
    "ORDER_SQL",
    "ITEMS_SQL",
    "SHIPPING_SQL",
    "PAYMENTS_SQL",
    "MULTI_SQL",
    "JOIN_SQL",
]
