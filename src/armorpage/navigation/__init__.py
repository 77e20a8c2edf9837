"""Python model of the browser navigation controller.

Lets tests drive SPA transitions server-side: link interception,
request sequencing and cancellation, and the DOM patch applied after a
successful fetch.
"""

from armorpage.navigation.controller import (
    NAVIGATE_EVENT,
    Fetch,
    FetchResult,
    History,
    NavigationController,
    NavState,
    normalize_url,
)
from armorpage.navigation.document import DispatchedEvent, Document, ScriptTag
from armorpage.navigation.links import Click, Link, should_intercept

__all__ = [
    "NAVIGATE_EVENT",
    "Click",
    "DispatchedEvent",
    "Document",
    "Fetch",
    "FetchResult",
    "History",
    "Link",
    "NavState",
    "NavigationController",
    "ScriptTag",
    "normalize_url",
    "should_intercept",
]
