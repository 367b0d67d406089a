"""Scheme classification heuristics (pure, no I/O).

Workspaces integrated with CocoaPods expose one scheme per pod plus
aggregate `Pods-*` and privacy-manifest targets. These helpers hide that
noise and suggest which schemes play the development, distribution and
"main" roles. Everything here is a plain substring/prefix test over fixed
keyword tables.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from core.domain.models import SchemePair
from core.errors import ValidationError

DEPENDENCY_MANAGER_PREFIXES: tuple[str, ...] = ("pods-",)

PRIVACY_MARKER = "privacy"

THIRD_PARTY_KEYWORDS: tuple[str, ...] = (
    "kingfisher",
    "snapkit",
    "swiftyjson",
    "adjust",
    "grdb",
    "mbprogresshud",
    "mjrefresh",
    "thinking",
    "jxpaging",
    "jxsegmented",
    "jxphoto",
)

DEV_PATTERNS: tuple[str, ...] = ("dev", "debug", "staging")
DIS_PATTERNS: tuple[str, ...] = ("prod", "release", "appstore")


def _matches_any(name: str, patterns: Iterable[str]) -> bool:
    lower = name.lower()
    return any(p in lower for p in patterns)


def is_third_party(scheme: str, project_name: str | None = None) -> bool:
    """Tell whether a scheme was injected by a dependency manager or a library.

    The denylist is checked before anything else, so a project that happens
    to be named like a known library still gets its scheme flagged.
    `project_name` is accepted for callers that have it but never rescues a
    flagged name.
    """

    name = scheme.lower()
    if name.startswith(DEPENDENCY_MANAGER_PREFIXES):
        return True
    if PRIVACY_MARKER in name:
        return True
    if any(keyword in name for keyword in THIRD_PARTY_KEYWORDS):
        return True
    return False


def filter_schemes(
    schemes: Sequence[str],
    project_name: str | None = None,
    *,
    hide_third_party: bool = True,
) -> list[str]:
    """Drop third-party schemes, unless that would leave nothing to pick from."""

    if not hide_third_party:
        return list(schemes)
    filtered = [s for s in schemes if not is_third_party(s, project_name)]
    return filtered or list(schemes)


def suggest_pair(schemes: Sequence[str]) -> SchemePair:
    """Suggest the development and distribution schemes.

    Single-scheme projects get the same scheme for both roles.
    """

    if not schemes:
        return SchemePair(dev="", dis="")

    dev = next((s for s in schemes if _matches_any(s, DEV_PATTERNS)), schemes[0])
    dis = next(
        (s for s in schemes if _matches_any(s, DIS_PATTERNS)),
        next((s for s in schemes if s != dev), dev),
    )
    return SchemePair(dev=dev, dis=dis)


def suggest_main(schemes: Sequence[str], project_name: str | None) -> str:
    """Pick the scheme most likely to build the app itself."""

    if not schemes:
        return ""
    project = (project_name or "").lower()
    if project:
        for scheme in schemes:
            if scheme.lower() == project:
                return scheme
        for scheme in schemes:
            if project in scheme.lower():
                return scheme
    return schemes[0]


def lock_main_scheme(schemes: Sequence[str], main: str) -> SchemePair:
    """Pin distribution to `main`; development goes to a dev-looking sibling."""

    if not main.strip():
        raise ValidationError("no main scheme available to lock", operation="lock main scheme")
    dev = next(
        (s for s in schemes if s != main and _matches_any(s, DEV_PATTERNS)),
        main,
    )
    return SchemePair(dev=dev, dis=main)
