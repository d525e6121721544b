"""Operating-system details and the PCR selection used for attestation."""

from __future__ import annotations

import logging
import re
from os import PathLike
from typing import NamedTuple

_log = logging.getLogger(__name__)

_UNIX_PCRS = (0, 1, 2, 3, 4, 5, 6, 7)
_WINDOWS_PCRS = (0, 1, 2, 3, 4, 5, 6, 7, 11, 12, 13, 14)

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class WindowsVersion(NamedTuple):
    """Version numbers and build of a Windows guest."""

    major: int
    minor: int
    build: str


def get_attestation_pcr_list(platform_unix: bool = True) -> list[int]:
    """Return the PCR indices that are quoted for attestation on this platform."""
    return list(_UNIX_PCRS if platform_unix else _WINDOWS_PCRS)


def parse_os_release_file(path: str | PathLike[str], delim: str = "=") -> dict[str, str]:
    """Read key/value lines from an os-release style file.

    A line is split at the first character found in ``delim``; lines holding
    none of them are skipped. Every double quote is removed from the value.
    """
    if not delim:
        raise ValueError("delimiter must not be empty")

    with open(path, encoding="utf-8", errors="replace", newline="") as handle:
        text = handle.read()

    entries: dict[str, str] = {}
    for line in text.split("\n"):
        positions = [pos for pos in (line.find(ch) for ch in delim) if pos >= 0]
        if not positions:
            continue
        split_at = min(positions)
        key = line[:split_at]
        value = line[split_at + 1 :].replace('"', "")
        entries[key] = value
    return entries


def _parse_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    number = int(match.group(1))
    if not _INT_MIN <= number <= _INT_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return number


def parse_version_string(text: str) -> tuple[int, int]:
    """Return the (major, minor) version numbers from a dotted version string.

    A missing minor part counts as 0. Components after the minor are ignored.
    """
    if not text:
        raise ValueError("version string is empty")

    major_str, sep, rest = text.partition(".")
    try:
        major = _parse_int(major_str)
    except ValueError as exc:
        raise ValueError(f"failed to get major version from string: {major_str!r}") from exc

    minor = 0
    if sep:
        minor_str = rest.partition(".")[0]
        try:
            minor = _parse_int(minor_str)
        except ValueError as exc:
            raise ValueError(
                f"failed to get minor version from string: {minor_str!r}"
            ) from exc

    # Versions are held as unsigned 32-bit numbers.
    return major & 0xFFFFFFFF, minor & 0xFFFFFFFF


def get_windows_version() -> WindowsVersion:
    """Return the Windows version reported in attestation requests."""
    return WindowsVersion(10, 0, "NotApplicable")