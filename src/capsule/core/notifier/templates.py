"""
Notification Templates

Pure rendering of task payloads into subject, plain text and HTML.
"""

from html import escape
from typing import Union

from ..outbox.models import RegionUnlockedPayload, TeamUnlockedPayload
from .base import RenderedMessage


def _format_day(value) -> str:
    return value.strftime("%B %d, %Y").replace(" 0", " ")


def render_team_unlocked(payload: TeamUnlockedPayload, app_base_url: str) -> RenderedMessage:
    subject = f"Unlocked: {payload.team_name}"
    text = (
        f"The team {payload.team_name} ({payload.team_tag}, {payload.region}) "
        f"is now unlocked in the Time Capsule.\n\n"
        f"Predict now: {app_base_url}\n"
    )
    html = (
        f"<p>The team <strong>{escape(payload.team_name)}</strong> "
        f"({escape(payload.team_tag)}, {escape(payload.region)}) "
        f"is now unlocked in the Time Capsule.</p>"
        f'<p><a href="{escape(app_base_url, quote=True)}">Predict Now</a></p>'
    )
    return RenderedMessage(subject=subject, text=text, html=html)


def render_region_unlocked(payload: RegionUnlockedPayload, app_base_url: str) -> RenderedMessage:
    kickoff = _format_day(payload.kickoff_date)
    teams = "team is" if payload.unlocked_count == 1 else "teams are"
    subject = f"Unlocked: {payload.region}"
    text = (
        f"Predictions for {payload.region} are open. "
        f"{payload.unlocked_count} {teams} unlocked so far; kickoff is {kickoff}.\n\n"
        f"Predict now: {app_base_url}\n"
    )
    html = (
        f"<p>Predictions for <strong>{escape(payload.region)}</strong> are open. "
        f"{payload.unlocked_count} {teams} unlocked so far; kickoff is {escape(kickoff)}.</p>"
        f'<p><a href="{escape(app_base_url, quote=True)}">Predict Now</a></p>'
    )
    return RenderedMessage(subject=subject, text=text, html=html)


def render(
    payload: Union[TeamUnlockedPayload, RegionUnlockedPayload],
    app_base_url: str,
) -> RenderedMessage:
    """Render the message for a task payload."""
    if isinstance(payload, TeamUnlockedPayload):
        return render_team_unlocked(payload, app_base_url)
    if isinstance(payload, RegionUnlockedPayload):
        return render_region_unlocked(payload, app_base_url)
    raise TypeError(f"No template for payload {type(payload).__name__}")
