# ABOUTME: Routes module initialization.
# ABOUTME: Exports all route modules for FastAPI app.

from newsdesk.web.routes import api, newspaper

__all__ = ["api", "newspaper"]
