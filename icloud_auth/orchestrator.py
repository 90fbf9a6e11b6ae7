"""Turns an AuthResult into an rclone.conf update or a printed command."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .auth.models import AuthResult
from .messages import Messages
from .rclone.config import (
    DEFAULT_REMOTE_NAME,
    build_rclone_command,
    has_remote_section,
    update_rclone_config_content,
)
from .rclone.filesystem import write_rclone_config_content
from .rclone.process import check_rclone_connection


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestrateResult:
    """What to do with a fresh AuthResult.

    Attributes:
        rclone_command: Equivalent ``rclone config update`` command (always set)
        updated_config_content: Patched rclone.conf text, or None when there is
            no config file or it has no section for the remote
    """

    rclone_command: str
    updated_config_content: Optional[str]


def orchestrate(
    authenticate: Callable[[], AuthResult],
    existing_config_content: Optional[str],
    remote_name: str = DEFAULT_REMOTE_NAME,
) -> OrchestrateResult:
    """Authenticate once and prepare the config patch for ``remote_name``.

    Args:
        authenticate: Runs the login flow (e.g. ``ICloudAuthenticator.authenticate``)
        existing_config_content: Current rclone.conf text, or None if there is none
        remote_name: Section to patch

    Returns:
        OrchestrateResult

    Raises:
        Whatever ``authenticate`` raises
    """
    result = authenticate()
    rclone_command = build_rclone_command(result.cookies, result.trust_token, remote_name)

    updated_config_content = None
    if existing_config_content is not None:
        if has_remote_section(existing_config_content, remote_name):
            updated_config_content = update_rclone_config_content(
                existing_config_content, result.cookies, result.trust_token, remote_name
            )
        else:
            logger.warning(f"Remote [{remote_name}] not found in rclone config, falling back to command")

    return OrchestrateResult(rclone_command=rclone_command, updated_config_content=updated_config_content)


def report_auth_result(
    result: OrchestrateResult,
    config_path: Union[str, Path],
    remote_name: str = DEFAULT_REMOTE_NAME,
    test_connection: bool = True,
) -> None:
    """Write the patched config and test it, or print the command to run."""
    if result.updated_config_content is not None:
        write_rclone_config_content(result.updated_config_content, config_path)
        print(Messages.RCLONE_CONF_UPDATED)
        if test_connection:
            check_rclone_connection(remote_name)
    else:
        print(Messages.RCLONE_COMMAND_INSTRUCTIONS)
        print(result.rclone_command)
