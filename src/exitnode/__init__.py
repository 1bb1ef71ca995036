"""
exitnode - Mullvad exit node selection for Tailscale

This package picks the best Mullvad exit node offered through a tailnet,
optionally by measured latency, and applies it to the running tailscaled.
"""

__version__ = "1.0.0"


# Lazy imports so that ``exitnode.__version__`` stays cheap to read
def __getattr__(name):
    """Lazy loading of package components to avoid unnecessary imports."""
    if name == "Candidate":
        from .models import Candidate

        return Candidate
    elif name == "build_catalog":
        from .catalog import build_catalog

        return build_catalog
    elif name == "filter_by_country":
        from .catalog import filter_by_country

        return filter_by_country
    elif name == "select_by_priority":
        from .selection import select_by_priority

        return select_by_priority
    elif name == "select_by_latency":
        from .selection import select_by_latency

        return select_by_latency
    elif name == "LocalClient":
        from .localapi import LocalClient

        return LocalClient
    elif name == "AppSettings":
        from .config import AppSettings

        return AppSettings
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


# Define the public API of the package
__all__ = [
    "Candidate",
    "build_catalog",
    "filter_by_country",
    "select_by_priority",
    "select_by_latency",
    "LocalClient",
    "AppSettings",
    "__version__",
]
