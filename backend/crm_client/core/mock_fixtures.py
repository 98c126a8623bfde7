"""Mock Fixtures — deterministic dashboard data and the summaries derived from it.

Invariants:
    - Fixture records are fixed; only timestamps move with the injected `now_ms`
    - Summaries are computed from the records, never hardcoded
    - Builders return fresh dicts on every call (callers may mutate them)
"""

import copy

DAY_MS = 24 * 60 * 60 * 1000

DEFAULT_PREFERENCES = {"theme": "light", "pageSize": 25}

_OPPORTUNITIES = [
    {
        "opportunity_id": "OP 662800",
        "opportunity_number": "1755066275263x905617189420662800",
        "customer_name": "John Smith",
        "customer_email": "john.smith@example.com",
        "customer_type": "Existing",
        "customer_rating": "A",
        "company": "Company A",
        "location": "New York",
        "age": "1154.2",
        "status": "progress",
        "source": "Chat",
        "campaign": "Web Chat",
        "product_details": [
            {"name": "Enterprise Suite", "category": "Software",
             "quantity": 1, "unit_price": 50000, "total_price": 50000},
        ],
        "services_details": [
            {"name": "Implementation", "category": "Professional Services",
             "quantity": 1, "unit_price": 15000, "total_price": 15000},
        ],
        "date_created": "1755066206661",
        "created_by": "Sharon Kwamboka",
        "assigned_to": "Sharon Kwamboka",
        "amount": 65000,
    },
    {
        "opportunity_id": "OP 849600",
        "opportunity_number": "1755066281548x628851611965849600",
        "customer_name": "Sarah Johnson",
        "customer_email": "sarah.j@example.com",
        "customer_type": "New",
        "customer_rating": "B",
        "company": "Company A",
        "location": "Chicago",
        "age": "1154.2",
        "status": "new",
        "source": "Referral",
        "campaign": "Partner Program",
        "product_details": [
            {"name": "Business Pro", "category": "Software",
             "quantity": 2, "unit_price": 25000, "total_price": 50000},
        ],
        "services_details": [],
        "date_created": "1755066212909",
        "created_by": "David Chen",
        "assigned_to": "David Chen",
        "amount": 50000,
    },
    {
        "opportunity_id": "OP 491810",
        "opportunity_number": "1755066298765x123456789012345678",
        "customer_name": "Mike Thompson",
        "customer_email": "mike.t@example.com",
        "customer_type": "Existing",
        "customer_rating": "A+",
        "company": "Company A",
        "location": "San Francisco",
        "age": "20.5",
        "status": "closed_won",
        "source": "Website",
        "campaign": "Enterprise Campaign",
        "product_details": [
            {"name": "Enterprise Platform", "category": "Software",
             "quantity": 1, "unit_price": 120000, "total_price": 120000},
        ],
        "services_details": [
            {"name": "Custom Development", "category": "Professional Services",
             "quantity": 1, "unit_price": 45000, "total_price": 45000},
            {"name": "Training", "category": "Education",
             "quantity": 1, "unit_price": 15000, "total_price": 15000},
        ],
        "date_created": "1755066221234",
        "created_by": "Maria Garcia",
        "assigned_to": "Maria Garcia",
        "amount": 180000,
    },
]

# (order id, customer, days ago, status, value, items, owner)
_SALES_ORDERS = [
    ("SO-2024-001", "Global Tech Inc", 3, "delivered", 18450, 3, "David Chen"),
    ("SO-2024-002", "Nexus Solutions", 4, "shipped", 12800, 2, "Sarah Jones"),
    ("SO-2024-003", "Inghb Corporation", 5, "processing", 24300, 5, "Maria Garcia"),
]

# (ticket id, status, priority, subject, hours ago)
_TICKETS = [
    ("HD-1001", "open", "high", "Login issue", 24),
    ("HD-1002", "in_progress", "medium", "Billing discrepancy", 12),
]


def summarize_opportunities(opportunities: list[dict]) -> dict:
    """Pipeline figures shown on the opportunities dashboard."""
    if not opportunities:
        return {
            "totalPipelineValue": 0, "activeOpportunities": 0,
            "averageDealSize": 0, "averageDealAge": 0,
            "winRate": 0, "totalOpportunities": 0,
        }
    total = sum(o.get("amount", 0) for o in opportunities)
    count = len(opportunities)
    won = sum(1 for o in opportunities if o.get("status") == "closed_won")
    lost = sum(1 for o in opportunities if o.get("status") == "closed_lost")
    ages = [float(o.get("age", 0)) for o in opportunities]
    return {
        "totalPipelineValue": total,
        "activeOpportunities": count - lost,
        "averageDealSize": round(total / count),
        "averageDealAge": round(sum(ages) / count),
        "winRate": round(won / count * 100),
        "totalOpportunities": count,
    }


def summarize_sales_orders(orders: list[dict]) -> dict:
    """Order figures shown on the sales-orders dashboard."""
    if not orders:
        return {
            "totalOrderValue": 0, "totalOrders": 0, "deliveredOrders": 0,
            "avgOrderValue": 0, "fulfillmentRate": 0,
        }
    total = sum(o.get("total_order_value", 0) for o in orders)
    delivered = sum(1 for o in orders if o.get("status") == "delivered")
    return {
        "totalOrderValue": total,
        "totalOrders": len(orders),
        "deliveredOrders": delivered,
        "avgOrderValue": round(total / len(orders)),
        "fulfillmentRate": round(delivered / len(orders) * 100),
    }


def opportunities_listing() -> dict:
    opportunities = copy.deepcopy(_OPPORTUNITIES)
    return {
        "opportunities": opportunities,
        "summary": summarize_opportunities(opportunities),
        "pagination": {
            "page": 1, "limit": 100,
            "total": len(opportunities), "pages": 1,
        },
    }


def sales_orders_listing(now_ms: int) -> dict:
    orders = [
        {
            "order_id": order_id,
            "order_number": order_id,
            "customer_name": customer,
            "date_created": str(now_ms - days_ago * DAY_MS),
            "status": status,
            "total_order_value": value,
            "items": items,
            "assigned_to": owner,
        }
        for order_id, customer, days_ago, status, value, items, owner in _SALES_ORDERS
    ]
    return {"orders": orders}


def dashboard_summary(now_ms: int) -> dict:
    return {
        "opportunities": opportunities_listing()["summary"],
        "salesOrders": summarize_sales_orders(sales_orders_listing(now_ms)["orders"]),
    }


def helpdesk_listing(now_ms: int) -> dict:
    tickets = [
        {
            "id": ticket_id,
            "status": status,
            "priority": priority,
            "subject": subject,
            "created_at": now_ms - hours_ago * 60 * 60 * 1000,
        }
        for ticket_id, status, priority, subject, hours_ago in _TICKETS
    ]
    return {"tickets": tickets, "pagination": {"page": 1, "total": len(tickets)}}
