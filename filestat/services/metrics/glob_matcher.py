"""Glob Matcher: lazy enumeration of paths matching a pattern below a directory.

Patterns support ``*``, ``?`` and ``[...]`` within a path segment, ``**`` for
any number of directories, ``{a,b}`` alternation and ``\\`` escapes. Hidden
files are matched like any other file.
"""

import posixpath
import re
from typing import Iterator, Tuple

from wcmatch import glob

_GLOB_META = re.compile(r"[*?[{\\]")
_GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB


def split_pattern(pattern: str) -> Tuple[str, str]:
    """Split ``pattern`` into a meta-free base directory and the glob remainder.

    >>> split_pattern("var/log/**/*.log")
    ('var/log', '**/*.log')
    >>> split_pattern("*.log")
    ('.', '*.log')
    >>> split_pattern("/etc/hosts")
    ('/etc', 'hosts')
    """
    match = _GLOB_META.search(pattern)
    end = match.start() if match else len(pattern)
    sep = pattern.rfind("/", 0, end)
    if sep == -1:
        return ".", pattern
    if sep == 0:
        return "/", pattern[1:]
    return pattern[:sep], pattern[sep + 1:]


def iter_matches(base_dir: str, pattern: str) -> Iterator[str]:
    """Yield paths relative to ``base_dir`` that match ``pattern``.

    Results are produced while the directory tree is walked. Unreadable
    directories are skipped; a missing ``base_dir`` yields nothing.

    Raises:
        ValueError: If the pattern or directory cannot be used as a path
    """
    if not pattern:
        return
    yield from glob.iglob(pattern, flags=_GLOB_FLAGS, root_dir=base_dir or ".")


def join_clean(*parts: str) -> str:
    """Join path parts below the first non-empty one and normalise the result.

    Later parts never replace earlier ones, so an absolute pattern stays under
    its tree root.

    >>> join_clean("/mnt/m1", "/etc/hosts")
    '/mnt/m1/etc/hosts'
    >>> join_clean("", "/etc/hosts")
    '/etc/hosts'
    """
    parts = tuple(part for part in parts if part)
    if not parts:
        return "."
    head, *tail = parts
    return posixpath.normpath(posixpath.join(head, *(part.lstrip("/") for part in tail)))
