"""Parsing of ``git ls-remote`` output.

Each listing line is ``<commit>\\t<ref>``. Tags and branches share one parser
and differ only in the ref prefix stripped to obtain the short name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from gitstate.exceptions import InvalidFilterError

TAG_PREFIX: Final = "refs/tags/"
BRANCH_PREFIX: Final = "refs/heads/"


@dataclass(frozen=True, slots=True)
class RefLine:
    """One parsed listing line.

    Attributes:
        commit_id: The object id, exactly as listed. Not validated.
        name: The ref name with the prefix stripped, or "" if the line had
            no ref column.
    """

    commit_id: str
    name: str


def parse_ref_line(line: str, prefix: str = "") -> RefLine:
    """Split a listing line on its first tab and strip prefix from the ref.

    Args:
        line: A single line of listing output, without its newline.
        prefix: Removed once from the start of the ref, if present.

    Returns:
        The parsed line. A line without a tab is all commit id and has an
        empty name.

    Example:
        >>> parse_ref_line("abc123\\trefs/tags/v1.0", TAG_PREFIX)
        RefLine(commit_id='abc123', name='v1.0')
        >>> parse_ref_line("abc123", TAG_PREFIX)
        RefLine(commit_id='abc123', name='')
    """
    commit_id, tab, ref = line.partition("\t")
    if not tab:
        return RefLine(commit_id, "")
    return RefLine(commit_id, ref.removeprefix(prefix))


def compile_filter(pattern: str | None) -> re.Pattern[str] | None:
    """Compile a ref name filter.

    Args:
        pattern: A regular expression, or None/"" for no filtering.

    Returns:
        The compiled pattern, or None when there is nothing to filter.

    Raises:
        InvalidFilterError: If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        msg = f"Invalid filter pattern {pattern!r}: {e}"
        raise InvalidFilterError(msg, pattern=pattern) from e


def parse_ref_listing(
    output: str,
    prefix: str = "",
    name_filter: re.Pattern[str] | None = None,
) -> list[RefLine]:
    """Parse full listing output, keeping lines with a usable name.

    Lines whose name is empty (blank lines, lines without a tab) are dropped.
    When name_filter is given, only names it matches anywhere are kept.
    Listing order is preserved.

    Args:
        output: Raw listing output.
        prefix: Ref prefix to strip from each name.
        name_filter: Optional compiled filter from compile_filter.

    Returns:
        Parsed lines in listing order.
    """
    refs: list[RefLine] = []
    for line in output.split("\n"):
        ref = parse_ref_line(line, prefix)
        if not ref.name:
            continue
        if name_filter is not None and not name_filter.search(ref.name):
            continue
        refs.append(ref)
    return refs
