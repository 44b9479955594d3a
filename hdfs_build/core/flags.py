# SPDX-License-Identifier: MIT
"""Flag list helpers for compiler command lines.

Every flag the libhdfs build passes is a single token (``-fcommon``,
``/wd4100``, ``-w``), so de-duplication works on individual strings.
"""

from __future__ import annotations


def deduplicate_flags(flags: list[str]) -> list[str]:
    """De-duplicate a list of flags.

    Order is preserved and the first occurrence wins.

    Examples:
        >>> deduplicate_flags(["-w", "-fcommon", "-w"])
        ['-w', '-fcommon']
    """
    return list(dict.fromkeys(flags))


def merge_flags(existing: list[str], new: list[str]) -> None:
    """Merge new flags into existing list, avoiding duplicates.

    Modifies ``existing`` in place.

    Examples:
        >>> existing = ["-w", "-fcommon"]
        >>> merge_flags(existing, ["-fcommon", "-fvisibility=hidden"])
        >>> existing
        ['-w', '-fcommon', '-fvisibility=hidden']
    """
    seen = set(existing)
    for flag in new:
        if flag not in seen:
            seen.add(flag)
            existing.append(flag)
