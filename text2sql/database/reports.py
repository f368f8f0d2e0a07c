"""
Precomputed dashboard reports over the ``sale`` schema.

Fixed, trusted queries (no model involvement) behind ``GET /insights``.
All four run on one borrowed connection.
"""

import logging

import asyncpg

from text2sql.database.pool import DatabasePool
from text2sql.models.api import InsightsResponse
from text2sql.models.errors import QueryExecutionError

logger = logging.getLogger(__name__)

REVENUE_BY_CHANNEL_QUERY = """
    SELECT
        ch.channel_name AS channel,
        ROUND(SUM(oi.line_total_gbp)::numeric, 2) AS revenue_gbp
    FROM sale.order_items oi
    JOIN sale.orders o ON o.order_id = oi.order_id
    JOIN sale.channels ch ON ch.channel_id = o.channel_id
    WHERE oi.is_refund = FALSE
    GROUP BY ch.channel_name
    ORDER BY revenue_gbp DESC
"""

CATEGORY_PERFORMANCE_QUERY = """
    SELECT
        mc.category_name AS category,
        ROUND(SUM(oi.line_total_gbp)::numeric, 2) AS revenue_gbp
    FROM sale.order_items oi
    JOIN sale.menu_items mi ON mi.menu_item_id = oi.menu_item_id
    JOIN sale.menu_categories mc ON mc.category_id = mi.category_id
    WHERE oi.is_refund = FALSE
    GROUP BY mc.category_name
    ORDER BY revenue_gbp DESC
"""

MONTHLY_REVENUE_QUERY = """
    SELECT
        TO_CHAR(order_dt, 'YYYY-MM') AS month,
        ROUND(SUM(net_total_gbp)::numeric, 2) AS revenue_gbp
    FROM sale.orders
    WHERE is_refund_order = FALSE
    GROUP BY TO_CHAR(order_dt, 'YYYY-MM')
    ORDER BY month ASC
"""

TOP_STORES_QUERY = """
    SELECT
        s.store_name,
        ROUND(SUM(CASE WHEN o.is_refund_order = FALSE THEN o.net_total_gbp ELSE 0 END)::numeric, 2)
            AS revenue_gbp,
        COUNT(*) AS orders
    FROM sale.orders o
    JOIN sale.stores s ON s.store_id = o.store_id
    GROUP BY s.store_name
    ORDER BY revenue_gbp DESC
    LIMIT 5
"""


async def get_dashboard_insights(pool: DatabasePool) -> InsightsResponse:
    """
    Run the four dashboard reports.

    Raises:
        QueryExecutionError: Any report query failed
    """
    try:
        async with pool.acquire() as conn:
            revenue_by_channel = await conn.fetch(REVENUE_BY_CHANNEL_QUERY)
            category_performance = await conn.fetch(CATEGORY_PERFORMANCE_QUERY)
            monthly_revenue = await conn.fetch(MONTHLY_REVENUE_QUERY)
            top_stores = await conn.fetch(TOP_STORES_QUERY)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.error(f"Failed to load insights: {e}")
        raise QueryExecutionError(f"Failed to load insights: {e}") from e

    return InsightsResponse(
        revenue_by_channel=[dict(record) for record in revenue_by_channel],
        category_performance=[dict(record) for record in category_performance],
        monthly_revenue=[dict(record) for record in monthly_revenue],
        top_stores=[dict(record) for record in top_stores],
    )
