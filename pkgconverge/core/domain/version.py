"""
L1 Domain — Version-release comparison (pure).

Orders ``[EPOCH:]VERSION-RELEASE`` strings the way the rpm database
does. No I/O, no subprocess.

Each of VERSION and RELEASE is split into runs of digits, runs of
ASCII letters, and the two marker characters ``~`` and ``^``; every
other character only separates runs. Runs are compared left to right:

    - digits compare numerically, letters compare lexically
    - a numeric run is newer than an alphabetic one
    - ``~`` sorts before anything, end of string included
      (``1.0~rc1`` < ``1.0``)
    - ``^`` sorts after end of string but before any other run
      (``1.0`` < ``1.0^git1`` < ``1.0.1``)
    - otherwise, whichever string has runs left over is newer
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

LESS = -1
EQUAL = 0
GREATER = 1

_RUN_RE = re.compile(r"[0-9]+|[A-Za-z]+|~|\^")


@dataclass(frozen=True)
class EVR:
    """A parsed ``[EPOCH:]VERSION[-RELEASE]`` string."""

    epoch: int
    version: str
    release: str

    def __str__(self) -> str:
        prefix = f"{self.epoch}:" if self.epoch else ""
        suffix = f"-{self.release}" if self.release else ""
        return f"{prefix}{self.version}{suffix}"


def parse_evr(value: str) -> EVR:
    """Split a version-release string into epoch, version and release.

    The release is everything after the last ``-``. An epoch prefix is
    only recognized when it is all digits.
    """
    value = value.strip()
    epoch = 0
    head, sep, rest = value.partition(":")
    if sep and head.isdigit():
        epoch = int(head)
        value = rest

    version, sep, release = value.rpartition("-")
    if not sep:
        return EVR(epoch=epoch, version=value, release="")
    return EVR(epoch=epoch, version=version, release=release)


def tokenize(segment: str) -> list[str]:
    """Split one half of a version-release into comparable runs."""
    return _RUN_RE.findall(segment)


def compare_segment(a: str, b: str) -> int:
    """Compare a single VERSION or RELEASE half."""
    ta, tb = tokenize(a), tokenize(b)
    i = 0
    while True:
        x = ta[i] if i < len(ta) else None
        y = tb[i] if i < len(tb) else None
        i += 1

        if x == "~" or y == "~":
            if x != "~":
                return GREATER
            if y != "~":
                return LESS
            continue

        if x == "^" or y == "^":
            if x is None:
                return LESS
            if y is None:
                return GREATER
            if x != "^":
                return GREATER
            if y != "^":
                return LESS
            continue

        if x is None and y is None:
            return EQUAL
        if x is None:
            return LESS
        if y is None:
            return GREATER

        x_num, y_num = x.isdigit(), y.isdigit()
        if x_num != y_num:
            return GREATER if x_num else LESS

        if x_num:
            xi, yi = int(x), int(y)
            if xi != yi:
                return GREATER if xi > yi else LESS
        elif x != y:
            return GREATER if x > y else LESS


def compare_versions(a: str, b: str) -> int:
    """Order two version-release strings.

    Returns:
        ``LESS`` (-1), ``EQUAL`` (0) or ``GREATER`` (1).
    """
    ea, eb = parse_evr(a), parse_evr(b)
    if ea.epoch != eb.epoch:
        return GREATER if ea.epoch > eb.epoch else LESS
    result = compare_segment(ea.version, eb.version)
    if result != EQUAL:
        return result
    return compare_segment(ea.release, eb.release)


def strip_release(value: str) -> str:
    """Drop the release half, keeping any epoch."""
    evr = parse_evr(value)
    return str(EVR(epoch=evr.epoch, version=evr.version, release=""))


def has_release(value: str) -> bool:
    return bool(parse_evr(value).release)


version_key = functools.cmp_to_key(compare_versions)


def sort_versions(versions: list[str], reverse: bool = False) -> list[str]:
    """Sort version-release strings oldest first (newest first if ``reverse``)."""
    return sorted(versions, key=version_key, reverse=reverse)
