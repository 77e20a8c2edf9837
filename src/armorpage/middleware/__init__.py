"""Request middleware.

``StaticFiles`` serves the public directory; the pages middleware lives
in ``armorpage.pages``.
"""

from armorpage.middleware.protocol import Middleware, Next
from armorpage.middleware.static import StaticFiles

__all__ = ["Middleware", "Next", "StaticFiles"]
