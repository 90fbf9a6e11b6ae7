"""Choosing which iCloud remote in rclone.conf receives the new token."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .messages import Messages


logger = logging.getLogger(__name__)


class NoIcloudRemotesError(Exception):
    """rclone.conf has no remote of type iclouddrive."""

    def __init__(self, message: str = Messages.NO_ICLOUD_REMOTES):
        super().__init__(message)


@dataclass(frozen=True)
class RemoteSelectionResult:
    remote_name: str


def run_remote_selection_flow(
    remotes: List[str],
    saved_default: Optional[str],
    prompt_select: Callable[[List[str], Optional[str]], str],
) -> RemoteSelectionResult:
    """Ask the operator which remote to update.

    The prompt is shown even for a single remote so the operator always
    confirms the target.

    Args:
        remotes: iCloud remote names found in rclone.conf
        saved_default: Remote chosen last time, offered as the default
        prompt_select: Interactive chooser, e.g. ``ConsolePrompter.prompt_select_remote``

    Returns:
        RemoteSelectionResult

    Raises:
        NoIcloudRemotesError: If ``remotes`` is empty
    """
    if not remotes:
        raise NoIcloudRemotesError()

    remote_name = prompt_select(remotes, saved_default)
    logger.info(f"Selected remote: {remote_name}")
    return RemoteSelectionResult(remote_name=remote_name)
