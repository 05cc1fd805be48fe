# quiz_engine/db/quiz_results.py
"""
Read-only access to users and their latest quiz snapshot.

Tables:
  users(id, username)
  quiz_results(user_id, activity_data jsonb, total_matchups int, completed_at)

Only the newest quiz_results row per user is considered.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List

from supabase import Client

from quiz_engine import config
from quiz_engine.events.population import QualifiedUser
from quiz_engine.models import activities_from_snapshot

logger = logging.getLogger(__name__)


def _latest_quiz_result(supabase: Client, user_id: Any) -> dict[str, Any] | None:
    resp = (
        supabase.table("quiz_results")
        .select("activity_data,total_matchups")
        .eq("user_id", user_id)
        .order("completed_at", desc=True)
        .limit(1)
        .execute()
    )
    data: Any = getattr(resp, "data", None)
    if not data:
        return None
    return data[0]


def fetch_qualified_users(
    supabase: Client,
    min_matchups: int = config.QUALIFIED_MIN_MATCHUPS,
) -> List[QualifiedUser]:
    resp = supabase.table("users").select("id,username").execute()
    users: Any = getattr(resp, "data", None) or []
    logger.info("[db] found %d users", len(users))

    qualified: List[QualifiedUser] = []
    for user in users:
        username = str(user.get("username") or "")
        row = _latest_quiz_result(supabase, user.get("id"))
        if row is None:
            logger.info("[db] %s has no quiz results", username)
            continue

        total = int(row.get("total_matchups") or 0)
        if total < min_matchups:
            logger.info("[db] %s has %d matchups (need %d)", username, total, min_matchups)
            continue

        raw = row.get("activity_data")
        try:
            if isinstance(raw, str):
                raw = json.loads(raw)
            activities = activities_from_snapshot(raw)
        except (ValueError, TypeError) as e:  # pydantic ValidationError is a ValueError
            logger.warning("[db] %s has an unreadable activity snapshot: %s", username, e)
            continue

        if not activities:
            logger.info("[db] %s has an empty activity snapshot", username)
            continue

        qualified.append(QualifiedUser(username=username, activities=activities, total_matchups=total))

    logger.info("[db] %d qualified users (min_matchups=%d)", len(qualified), min_matchups)
    return qualified
