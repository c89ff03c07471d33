"""Wazuh alert parsing and file name extraction."""

import json

from misp_match.errors import InputError


def read_full_log(raw: str) -> str:
    """
    Parse a Wazuh alert and return its full_log message.

    Args:
        raw: A single line of alert JSON

    Returns:
        The full_log string

    Raises:
        InputError: If the line is not a JSON object with a string full_log
    """
    try:
        alert = json.loads(raw)
    except ValueError as e:
        raise InputError(f"invalid alert JSON: {e}") from e

    if not isinstance(alert, dict):
        raise InputError("alert JSON is not an object")

    full_log = alert.get("full_log")
    if not isinstance(full_log, str):
        raise InputError("alert has no string 'full_log' field")
    return full_log


def extract_file_name(line: str) -> tuple[str, bool]:
    """
    Extract the just-added file name from a syscheck log line.

    The log embeds a Windows path in quotes, e.g.
    "File 'c:\\windows\\system32\\sru\\srudb.dat' added". The name runs from
    the last backslash to the last single quote after it.

    Returns:
        (filename, True) on success, ("", False) if no name was found
    """
    text = line.replace("\n", " ")

    start = text.rfind("\\")
    if start == -1:
        return "", False
    start += 1

    end = text.rfind("'", start)
    if end == -1:
        return "", False

    return text[start:end], True
