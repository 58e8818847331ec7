"""Route gate decisions for browser navigation.

Each request is classified by path and combined with whether its
``auth-token`` cookie verifies. The result is either "continue" or a
redirect to one of two landing pages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.config import Settings


class PathClass(str, Enum):
    EXCLUDED = "excluded"
    HOME = "home"
    PROTECTED = "protected"
    AUTH_FORM = "auth_form"
    OTHER = "other"


@dataclass(frozen=True)
class GateDecision:
    """Outcome for one request.

    Attributes:
        action: "continue" or "redirect"
        location: Redirect target path (only set for redirects)
        path_class: How the path was classified
        authenticated: Whether the cookie carried a valid token
    """

    action: str
    path_class: PathClass
    authenticated: bool
    location: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.action == "redirect"


def classify_path(path: str, settings: Settings) -> PathClass:
    """Classify a request path.

    Excluded prefixes (API routes, static assets, docs) are matched first,
    against the path without its leading slash, so "/api" and "/api/x" are
    both excluded.
    """
    bare = path.lstrip("/")
    if bare and any(bare.startswith(prefix) for prefix in settings.gate_excluded_list):
        return PathClass.EXCLUDED
    if path == "/":
        return PathClass.HOME
    if any(path.startswith(prefix) for prefix in settings.protected_paths_list):
        return PathClass.PROTECTED
    if any(path.startswith(prefix) for prefix in settings.auth_paths_list):
        return PathClass.AUTH_FORM
    return PathClass.OTHER


def decide(path: str, token: Optional[str], codec, settings: Settings) -> GateDecision:
    """Decide whether a request continues or is redirected."""
    path_class = classify_path(path, settings)

    if path_class in (PathClass.EXCLUDED, PathClass.OTHER):
        return GateDecision("continue", path_class, False)

    authenticated = bool(token) and codec.decode(token) is not None

    if path_class is PathClass.HOME:
        target = settings.protected_landing if authenticated else settings.login_landing
        return GateDecision("redirect", path_class, authenticated, target)

    if path_class is PathClass.PROTECTED and not authenticated:
        return GateDecision("redirect", path_class, authenticated, settings.login_landing)

    if path_class is PathClass.AUTH_FORM and authenticated:
        return GateDecision(
            "redirect", path_class, authenticated, settings.protected_landing
        )

    return GateDecision("continue", path_class, authenticated)
