"""Test utilities for armorpage applications.

    from armorpage.testing import TestBrowser, TestClient
"""

from armorpage.testing.browser import TestBrowser, client_fetcher, httpx_fetcher
from armorpage.testing.client import TestClient

__all__ = [
    "TestBrowser",
    "TestClient",
    "client_fetcher",
    "httpx_fetcher",
]
