"""
Dashboard statistics: stored course snapshots plus live per-slot rollups.
"""

from typing import List, Dict, Any

from pymongo import ASCENDING

import database

TOP_SLOTS_LIMIT = 5


def get_course_stats() -> List[Dict[str, Any]]:
    return database.get_documents("coursestats", sort=[("courseCode", ASCENDING)])


def get_top_slots(limit: int = TOP_SLOTS_LIMIT) -> List[Dict[str, Any]]:
    """Group live resources by slot.

    Ordered by resource count descending; equal counts fall back to slot
    name ascending so the ordering is stable across calls.
    """
    if limit <= 0:
        return []
    pipeline = [
        {
            "$group": {
                "_id": "$slot",
                "resources": {"$sum": 1},
                "score": {"$avg": "$qualityScore"},
            }
        },
        {"$sort": {"resources": -1, "_id": 1}},
        {"$limit": limit},
    ]
    rows = database.get_db()["resource"].aggregate(pipeline)
    return [
        {
            "name": row["_id"],
            "resources": row["resources"],
            "score": round(row.get("score") or 0),
        }
        for row in rows
    ]
