"""
Input validation functions for security boundaries.

Validates identifiers that end up in store queries (robot ids, session ids)
against safe patterns, so nothing a client sends can alter a PostgREST filter.
"""
import re

# UUIDs, slugs and numeric keys all fit this
_ID_PATTERN = re.compile(r'[A-Za-z0-9_-]+')


def validate_robot_id(robot_id: str) -> str:
    """
    Validate robot id against safe character pattern.

    Args:
        robot_id: Robot id to validate

    Returns:
        Validated robot id (stripped)

    Raises:
        ValueError: If id contains invalid characters or is wrong length
    """
    if not isinstance(robot_id, str):
        raise ValueError(f"Robot id must be a string, got {type(robot_id).__name__}")

    robot_id = robot_id.strip()
    if not robot_id or len(robot_id) > 100:
        raise ValueError(f"Robot id must be 1-100 characters, got {len(robot_id)}")

    if not _ID_PATTERN.fullmatch(robot_id):
        raise ValueError(
            f"Robot id '{robot_id}' contains invalid characters. "
            "Only letters, numbers, hyphens (-), and underscores (_) are allowed."
        )

    return robot_id


def validate_session_id(session_id: str) -> str:
    """
    Validate a client-supplied session identifier.

    Raises:
        ValueError: If the id is longer than 200 characters or has unsafe characters
    """
    if len(session_id) > 200:
        raise ValueError("Session id must be at most 200 characters")
    if not re.fullmatch(r'[A-Za-z0-9_.:-]*', session_id):
        raise ValueError("Session id contains invalid characters")
    return session_id
