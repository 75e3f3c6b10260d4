# ABOUTME: Middleware module initialization.
# ABOUTME: Exports caller identity dependencies.

from newsdesk.web.middleware.principal import CurrentPrincipal, get_current_principal

__all__ = ["CurrentPrincipal", "get_current_principal"]
