"""rclone.conf patching and iCloud remote discovery."""

import re
import logging
import configparser
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)


DEFAULT_REMOTE_NAME = "iclouddrive"
ICLOUD_REMOTE_TYPE = "iclouddrive"

SECTION_HEADER_PATTERN = re.compile(r"^\s*\[([^\]]+)\]\s*$")


def build_rclone_command(cookies: str, trust_token: str, remote_name: str = DEFAULT_REMOTE_NAME) -> str:
    """Build the ``rclone config update`` command equivalent to patching the file."""
    return f"rclone config update {remote_name} cookies='{cookies}' trust_token='{trust_token}'"


def update_rclone_config_content(
    content: str,
    cookies: str,
    trust_token: str,
    remote_name: str = DEFAULT_REMOTE_NAME,
) -> str:
    """Set ``cookies`` and ``trust_token`` in one section of an rclone.conf.

    Existing keys in the section are replaced in place, missing keys are
    appended once at the end of the section, and every other section is left
    as it was.

    Args:
        content: Full rclone.conf text
        cookies: Cookie header to store
        trust_token: Trust token to store
        remote_name: Section to patch (default: iclouddrive)

    Returns:
        Patched content, or ``content`` unchanged if the section is absent
    """
    lines = content.splitlines(keepends=True)
    bounds = _find_section(lines, remote_name)
    if bounds is None:
        logger.debug(f"Section [{remote_name}] not found, leaving config unchanged")
        return content

    start, end = bounds
    header = lines[start] if lines[start].endswith("\n") else lines[start] + "\n"
    body = lines[start + 1:end]
    body = _replace_or_append_key(body, "cookies", cookies)
    body = _replace_or_append_key(body, "trust_token", trust_token)
    return "".join(lines[:start] + [header] + body + lines[end:])


def has_remote_section(content: str, remote_name: str) -> bool:
    """Check whether rclone.conf text has a [remote_name] section of any type."""
    return _find_section(content.splitlines(keepends=True), remote_name) is not None


def parse_icloud_remotes(content: str) -> List[str]:
    """Return names of all sections with ``type = iclouddrive``, in file order."""
    parser = _parse(content)
    if parser is None:
        return []
    return [
        name for name in parser.sections()
        if parser.get(name, "type", fallback="").strip() == ICLOUD_REMOTE_TYPE
    ]


def validate_icloud_remote(content: str, remote_name: str) -> bool:
    """Check that ``remote_name`` exists and is an iCloud Drive remote."""
    return remote_name in parse_icloud_remotes(content)


def _parse(content: str) -> Optional[configparser.ConfigParser]:
    # Cookie values contain '%' and ';', so no interpolation or inline comments
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read_string(content)
    except configparser.Error as e:
        logger.warning(f"Could not parse rclone config: {e}")
        return None
    return parser


def _find_section(lines: List[str], remote_name: str) -> Optional[Tuple[int, int]]:
    """Return (header index, end index) of a section, or None if absent."""
    start = None
    for i, line in enumerate(lines):
        match = SECTION_HEADER_PATTERN.match(line)
        if not match:
            continue
        if start is not None:
            return start, i
        if match.group(1).strip() == remote_name:
            start = i
    if start is None:
        return None
    return start, len(lines)


def _replace_or_append_key(body: List[str], key: str, value: str) -> List[str]:
    key_pattern = re.compile(rf"^\s*{re.escape(key)}\s*=")
    new_line = f"{key} = {value}\n"

    result = []
    replaced = False
    for line in body:
        if key_pattern.match(line):
            # Keep the first occurrence's position, drop any duplicates
            if not replaced:
                result.append(new_line)
                replaced = True
            continue
        result.append(line)

    if not replaced:
        insert_at = len(result)
        while insert_at > 0 and not result[insert_at - 1].strip():
            insert_at -= 1
        if insert_at > 0 and not result[insert_at - 1].endswith("\n"):
            result[insert_at - 1] += "\n"
        result.insert(insert_at, new_line)

    return result
