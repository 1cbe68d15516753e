"""Template variables the provider substitutes into its system prompt."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from brev_ai.config import ClientConfig


def fixed_zone(config: ClientConfig) -> timezone:
    return timezone(timedelta(hours=config.utc_offset_hours), config.timezone_name)


def weekday_name(moment: datetime, names: list[str]) -> str:
    return names[moment.weekday()]


def build_variables(
    config: ClientConfig,
    user_name: str = "",
    user_location: str = "",
    now: datetime | None = None,
) -> dict[str, str]:
    """Return the ``{{NAME}}`` → value mapping for one completion request.

    *now* defaults to the current time; it is converted to the configured
    fixed-offset timezone.
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(fixed_zone(config))
    return {
        "{{USER_NAME}}": user_name.strip(),
        "{{USER_LOCATION}}": user_location.strip() or config.default_location,
        "{{CURRENT_DATETIME}}": moment.strftime("%d.%m.%Y %H:%M:%S"),
        "{{CURRENT_DATE}}": moment.strftime("%d.%m.%Y"),
        "{{CURRENT_TIME}}": moment.strftime("%H:%M:%S"),
        "{{CURRENT_WEEKDAY}}": weekday_name(moment, config.weekday_names),
        "{{CURRENT_TIMEZONE}}": config.timezone_name,
        "{{USER_LANGUAGE}}": config.language,
    }
