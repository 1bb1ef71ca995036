"""Error types raised by exit node selection.

Every fatal condition of a selection request is a subclass of
:class:`ExitNodeError` carrying a short ``kind`` string, so callers can decide
how to present it. Probe failures are not errors: they are absorbed into the
latency sentinel by the prober.
"""

from typing import Optional


class ExitNodeError(Exception):
    """Base exception for exit node selection."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NoCandidatesFound(ExitNodeError):
    """The catalog is empty after eligibility filtering."""

    kind = "no_candidates"

    def __init__(self, message: str = "no Mullvad exit nodes found"):
        super().__init__(message)


class NoCandidatesForRegion(ExitNodeError):
    """The country filter eliminated every candidate."""

    kind = "no_candidates_for_region"

    def __init__(self, country_code: str):
        self.country_code = country_code
        super().__init__(f"no Mullvad exit nodes found for country: {country_code}")


class NoOnlineCandidates(ExitNodeError):
    kind = "no_online_candidates"

    def __init__(self, message: str = "no online Mullvad exit nodes found"):
        super().__init__(message)


class NoProbeResponse(ExitNodeError):
    """Every probed candidate failed its latency test."""

    kind = "no_probe_response"

    def __init__(self, message: str = "no nodes responded to latency tests"):
        super().__init__(message)


class CandidateNotFound(ExitNodeError):
    kind = "candidate_not_found"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"exit node not found: {name}")


class CommitError(ExitNodeError):
    """The daemon did not accept a preference write."""

    kind = "commit_failed"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"failed to {operation}{detail}")


class CommitDenied(CommitError):
    """The preference write was refused for lack of permission."""

    kind = "commit_denied"


class DaemonError(ExitNodeError):
    """The tailscaled LocalAPI could not be reached or answered with an error."""

    kind = "daemon_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
