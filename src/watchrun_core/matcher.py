"""Glob pattern matching for changed paths.

Two pattern shapes are supported:

- A plain glob such as ``*.py``. It is matched against the base name of the
  path only; directory components in the pattern are never honored.
- A recursive glob containing ``**`` exactly once, such as ``src/**/*.ts``.
  The text before the marker is a plain string prefix the relative path must
  start with, the text after it is a plain glob for the base name. Either side
  may be empty.

A pattern with more than one ``**`` falls back to plain base-name matching,
which in practice only matches when the pattern has no ``/`` in it.
"""

import logging
import posixpath
import re
from functools import lru_cache

logger = logging.getLogger(__name__)

RECURSIVE_MARKER = "**"


def matches(relative_path: str, pattern: str) -> bool:
    """Check whether a relative path matches a watch pattern.

    Args:
        relative_path: Path relative to the watched root. Either separator works.
        pattern: Plain or recursive glob pattern.

    Returns:
        True if the path matches. Invalid glob syntax never matches.
    """
    path = relative_path.replace("\\", "/")

    if RECURSIVE_MARKER in pattern:
        parts = pattern.split(RECURSIVE_MARKER)
        if len(parts) == 2:
            prefix, suffix = parts[0], parts[1].removeprefix("/")

            if prefix and not path.startswith(prefix.removesuffix("/")):
                return False

            if suffix:
                return glob_match(suffix, posixpath.basename(path))
            return True

    return glob_match(pattern, posixpath.basename(path))


def glob_match(pattern: str, name: str) -> bool:
    """Match a single file name against a shell-style glob.

    ``*`` matches any run of non-``/`` characters, ``?`` a single one,
    ``[...]`` a character class (``^`` or ``!`` negates) and ``\\`` escapes the
    next character. Matching is case-sensitive.
    """
    regex = _compile(pattern)
    if regex is None:
        return False
    return regex.fullmatch(name) is not None


def is_valid_pattern(pattern: str) -> bool:
    """Return True if the glob part of ``pattern`` parses.

    For a recursive pattern only the base-name suffix is a glob; the prefix is
    compared as plain text.
    """
    parts = pattern.split(RECURSIVE_MARKER)
    if len(parts) == 2:
        suffix = parts[1].removeprefix("/")
        return not suffix or _compile(suffix) is not None
    return _compile(pattern) is not None


@lru_cache(maxsize=64)
def _compile(pattern: str) -> re.Pattern | None:
    try:
        return re.compile(_translate(pattern))
    except (ValueError, re.error) as e:
        logger.debug(f"Invalid glob pattern {pattern!r}: {e}")
        return None


def _translate(pattern: str) -> str:
    """Translate a glob into a regular expression.

    Raises:
        ValueError: On an unterminated class, empty class or trailing escape.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "\\":
            if i >= n:
                raise ValueError("trailing escape")
            out.append(re.escape(pattern[i]))
            i += 1
        elif c == "[":
            cls, i = _translate_class(pattern, i)
            out.append(cls)
        else:
            out.append(re.escape(c))
    return "".join(out)


def _translate_class(pattern: str, i: int) -> tuple[str, int]:
    n = len(pattern)
    negate = i < n and pattern[i] in "^!"
    if negate:
        i += 1

    items: list[str] = []
    while True:
        if i >= n:
            raise ValueError("unterminated character class")
        c = pattern[i]
        if c == "]" and items:
            i += 1
            break
        if c == "]":
            raise ValueError("empty character class")

        lo, i = _class_char(pattern, i)
        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise ValueError(f"bad range {lo}-{hi}")
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            items.append(re.escape(lo))

    body = "".join(items)
    if negate:
        return f"[^/{body}]", i
    return f"[{body}]", i


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    c = pattern[i]
    if c == "\\":
        if i + 1 >= len(pattern):
            raise ValueError("trailing escape")
        return pattern[i + 1], i + 2
    return c, i + 1
