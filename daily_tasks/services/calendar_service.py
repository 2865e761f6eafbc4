"""
Google Calendar mirror - best effort, never blocks task creation
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

import requests

from daily_tasks.core.config import settings
from daily_tasks.services.duration import parse_hhmm

logger = logging.getLogger(__name__)

DEFAULT_START = time(9, 0)
MIN_SPAN = timedelta(hours=1)
NOT_FILLED = "(not filled in)"


class CalendarError(Exception):
    pass


def _at(day: date, hhmm: Optional[str], tz: ZoneInfo) -> Optional[datetime]:
    minutes = parse_hhmm(hhmm)
    if minutes is None:
        return None
    return datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=tz)


def build_description(category: str, member: str, completion_criteria: Optional[str]) -> str:
    criteria = (completion_criteria or "").strip() or NOT_FILLED
    return "\n".join([
        f"Category: {category}",
        f"Assignee: {member or NOT_FILLED}",
        f"Completion criteria: {criteria}",
    ])


def build_event(day: date, start_time: Optional[str], end_time: Optional[str], summary: str,
                category: str, member: str, completion_criteria: Optional[str] = None,
                tz_name: Optional[str] = None) -> dict:
    """Event payload; 09:00 start and a one hour span when times are missing."""
    tz_name = tz_name or settings.CALENDAR_TIMEZONE
    tz = ZoneInfo(tz_name)

    start = _at(day, start_time, tz) or datetime.combine(day, DEFAULT_START, tzinfo=tz)
    end = _at(day, end_time, tz) or start + MIN_SPAN
    if end <= start:
        end = start + MIN_SPAN

    return {
        "summary": summary,
        "description": build_description(category, member, completion_criteria),
        "start": {"dateTime": start.isoformat(), "timeZone": tz_name},
        "end": {"dateTime": end.isoformat(), "timeZone": tz_name},
    }


def create_event(access_token: Optional[str], event: dict) -> dict:
    if not access_token:
        raise CalendarError("Google access token not found. Sign in with Google again.")

    try:
        response = requests.post(
            f"{settings.CALENDAR_API_URL}/calendars/primary/events",
            json=event,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=settings.CALENDAR_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Calendar request failed: {e}")
        raise CalendarError(f"Google Calendar unreachable: {e}") from e

    if not response.ok:
        raise CalendarError(f"Google Calendar API Error: {response.status_code} {response.text}")

    return response.json()


def mirror_task(task, access_token: Optional[str]) -> dict:
    event = build_event(
        task.date,
        task.start_time,
        task.end_time,
        task.name,
        task.category,
        task.member,
        task.completion_criteria,
    )
    created = create_event(access_token, event)
    logger.info(f"Calendar event created for task {task.id}")
    return created
