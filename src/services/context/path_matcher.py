from fnmatch import fnmatchcase
from typing import Iterable, Set


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """
    Glob match against repository-relative paths.

    A pattern ending in ``/`` matches everything below that directory, and a
    pattern without a slash also matches the basename, so ``*.lock`` catches
    ``web/yarn.lock``. A ``**/`` segment also matches zero directories, so
    ``src/**/*.py`` catches ``src/app.py``.
    """
    path = path.lstrip("/")
    basename = path.rsplit("/", 1)[-1]

    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue
        pattern = pattern.lstrip("/")
        if pattern.endswith("/"):
            if path.startswith(pattern) or f"/{pattern}" in f"/{path}":
                return True
            continue
        if "/" not in pattern and fnmatchcase(basename, pattern):
            return True
        if any(fnmatchcase(path, variant) for variant in _globstar_variants(pattern)):
            return True
    return False


def _globstar_variants(pattern: str) -> Set[str]:
    """The pattern plus every form with one or more ``**/`` segments dropped."""
    variants = {pattern}
    pending = [pattern]
    while pending:
        current = pending.pop()
        index = current.find("**/")
        while index != -1:
            if index == 0 or current[index - 1] == "/":
                collapsed = current[:index] + current[index + 3:]
                if collapsed not in variants:
                    variants.add(collapsed)
                    pending.append(collapsed)
            index = current.find("**/", index + 1)
    return variants
