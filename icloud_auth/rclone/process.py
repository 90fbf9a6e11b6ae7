"""Connectivity check against the freshly authenticated remote."""

import logging
import subprocess

from ..messages import Messages


logger = logging.getLogger(__name__)


def check_rclone_connection(remote_name: str, rclone_binary: str = "rclone", timeout: int = 60) -> bool:
    """List the remote's top-level directories to prove the new token works.

    Args:
        remote_name: rclone remote to list
        rclone_binary: rclone executable (default: rclone on PATH)
        timeout: Seconds before the listing is abandoned

    Returns:
        bool: True if ``rclone lsd`` succeeded
    """
    command = [rclone_binary, "lsd", f"{remote_name}:"]
    logger.debug(f"Running: {' '.join(command)}")
    try:
        completed = subprocess.run(
            command, capture_output=True, text=True, check=True, timeout=timeout
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        logger.warning(f"rclone connection test failed: {e}")
        print(Messages.CONNECTION_TEST_FAILED)
        return False

    print(Messages.CONNECTION_TEST_PASSED + completed.stdout)
    return True
