import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .constants import PERMISSION_DENIED_MARKERS
from .errors import CommitDenied, CommitError, DaemonError
from .models import Candidate

if TYPE_CHECKING:
    from .localapi import LocalClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    """A preference write the daemon accepted.

    Acceptance does not guarantee traffic is already flowing through the node.
    """

    exit_node_id: str

    @property
    def cleared(self) -> bool:
        return not self.exit_node_id


def is_permission_error(error: DaemonError) -> bool:
    if error.status_code == 403:
        return True
    return any(marker in error.message for marker in PERMISSION_DENIED_MARKERS)


class PreferenceCommitter:
    """Writes the exit node preference through the LocalAPI."""

    def __init__(self, client: "LocalClient") -> None:
        self.client = client

    async def commit(self, candidate: Optional[Candidate]) -> CommitResult:
        """
        Make ``candidate`` the active exit node, or clear it when ``None``.

        Raises:
            CommitDenied: the daemon refused the write for lack of permission
            CommitError: any other rejection
        """
        node_id = candidate.id if candidate is not None else ""
        operation = "set exit node" if node_id else "clear exit node"
        masked_prefs = {"ExitNodeID": node_id, "ExitNodeIDSet": True}

        try:
            await self.client.edit_prefs(masked_prefs)
        except DaemonError as e:
            if is_permission_error(e):
                raise CommitDenied(operation, e) from e
            raise CommitError(operation, e) from e

        if node_id:
            logger.debug(f"Exit node set to ID: {node_id}")
        else:
            logger.debug("Exit node preference cleared")
        return CommitResult(exit_node_id=node_id)
