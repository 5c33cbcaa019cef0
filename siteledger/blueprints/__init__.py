"""
SiteLedger
Blueprint registry helpers.
"""

from flask import request


def paginate_list(items: list, default_limit=200, max_limit=1000):
    """Apply limit/offset pagination to an in-memory list.

    Query params:
        limit  - max items (default 200, clamped to 0..max_limit)
        offset - starting position (default 0)

    Returns:
        (page_items, total_count)
    """
    total = len(items)
    try:
        limit = max(min(int(request.args.get("limit", default_limit)), max_limit), 0)
    except (ValueError, TypeError):
        limit = default_limit
    try:
        offset = max(int(request.args.get("offset", 0)), 0)
    except (ValueError, TypeError):
        offset = 0
    return items[offset:offset + limit], total
