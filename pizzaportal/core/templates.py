"""Plain ``{key}`` string interpolation with the configured template globals."""

from __future__ import annotations

from collections.abc import Mapping

from pizzaportal.core.config import settings

CONFIRMATION_EMAIL = (
    "Your {global.appName} order is confirmed!\n\n"
    "{summary}\n\n"
    "Have a nice day!\n"
    "{global.companyName}"
)


def interpolate(text: str, data: Mapping[str, object] | None = None) -> str:
    """Replace every ``{key}`` placeholder in *text* with its value.

    Template globals are exposed as ``{global.<name>}``. Placeholders with
    no matching key are left untouched.
    """
    values: dict[str, object] = {
        f"global.{key}": value for key, value in settings.TEMPLATE_GLOBALS.items()
    }
    values.update(data or {})
    for key, value in values.items():
        text = text.replace(f"{{{key}}}", str(value))
    return text
