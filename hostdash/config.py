"""Deployment profiles for hostdash.

A profile fixes the panel set (ordered kinds with their size policies) and how
many processes the table shows. It is chosen once at start by the entry point
and never changes while the dashboard runs.
"""

from __future__ import annotations

import sys
from typing import Any, NoReturn

PANEL_KINDS = ("cpu", "memory", "processes", "info")
SIZE_POLICIES = ("length", "min", "fill")

DEFAULT_CONFIG: dict[str, Any] = {
    "profile": "full",
    "tick_interval": 1.0,
    "margin": 1,
    "quit_key": "q",
    "truncate_ranking": False,
}

PROFILES: dict[str, dict[str, Any]] = {
    "full": {
        "display_count": 5,
        "panels": [
            {"kind": "cpu", "size": ("length", 3)},
            {"kind": "memory", "size": ("length", 3)},
            {"kind": "processes", "size": ("min", 8)},
            {"kind": "info", "size": ("fill", 0)},
        ],
    },
    "compact": {
        "display_count": 20,
        "panels": [
            {"kind": "cpu", "size": ("length", 3)},
            {"kind": "memory", "size": ("length", 3)},
            {"kind": "processes", "size": ("min", 10)},
        ],
    },
}


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base. Nested dicts are merged at the first level only."""
    merged = dict(base)
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _fail(message: str) -> NoReturn:
    print(f"hostdash: {message}", file=sys.stderr)
    raise SystemExit(1)


def validate_panels(panels: list[dict[str, Any]]) -> None:
    """Check every panel has a known kind and a well-formed size policy.

    Raises:
        SystemExit: On the first invalid panel.
    """
    if not panels:
        _fail("profile defines no panels")
    for panel in panels:
        kind = panel.get("kind")
        if kind not in PANEL_KINDS:
            _fail(f"unknown panel kind: {kind!r}")
        size = panel.get("size")
        if (
            not isinstance(size, tuple)
            or len(size) != 2
            or size[0] not in SIZE_POLICIES
            or not isinstance(size[1], int)
            or size[1] < 0
        ):
            _fail(f"invalid size policy for {kind} panel: {size!r}")


def load_config(profile: str | None = None) -> dict[str, Any]:
    """Build the runtime configuration for a deployment profile.

    Args:
        profile: Profile name from PROFILES. If None, the default profile
                 ("full") is used.

    Returns:
        Defaults merged with the profile's display count and panel set.

    Raises:
        SystemExit: If the profile is unknown or its panel set is invalid.
    """
    name = profile if profile is not None else DEFAULT_CONFIG["profile"]
    if name not in PROFILES:
        _fail(f"unknown profile: {name}")
    config = _deep_merge(DEFAULT_CONFIG, PROFILES[name])
    config["profile"] = name
    config["panels"] = [dict(p) for p in config["panels"]]
    validate_panels(config["panels"])
    if config["display_count"] < 0:
        _fail(f"display_count must be >= 0, got {config['display_count']}")
    return config
