"""
Glob matching for upload sources.

Resolves the include pattern and the exclude patterns of a run into the
ordered list of paths the upload loop walks.
"""

import glob
import os
from typing import List, Sequence, Set

from s3publish.exceptions import GlobError
from s3publish.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


def _check_pattern(pattern: str) -> None:
    """Raise GlobError for patterns the glob module would silently misread."""
    if not pattern:
        raise GlobError(pattern, "empty pattern")
    if "\x00" in pattern:
        raise GlobError(pattern, "pattern contains a NUL byte")

    # Same class rules as fnmatch: a leading "!" negates, a leading "]" is literal
    i = 0
    while i < len(pattern):
        if pattern[i] == "[":
            j = i + 1
            if j < len(pattern) and pattern[j] == "!":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end == -1:
                raise GlobError(pattern, "unterminated character class")
            i = end
        i += 1


def expand(pattern: str) -> List[str]:
    """
    Expand a single glob pattern against the filesystem.

    ``**`` matches any number of directories, including none. Wildcards also
    match entries whose names start with a dot. Results are sorted so every
    run walks files in the same order.

    Raises:
        GlobError: If the pattern is invalid or the walk fails
    """
    _check_pattern(pattern)
    try:
        return sorted(glob.glob(pattern, recursive=True, include_hidden=True))
    except (OSError, ValueError) as e:
        raise GlobError(pattern, original_error=e) from e


def _normalize(path: str) -> str:
    return os.path.normpath(path)


@log_function_call
def match_files(include: str, exclude: Sequence[str] = ()) -> List[str]:
    """
    Return every path matching ``include`` that no ``exclude`` pattern matches.

    The include expansion order is preserved. Exclusions are compared on
    normalized paths, so ``./dist/a.js`` excludes ``dist/a.js``.

    Args:
        include: Glob pattern selecting the files to upload
        exclude: Glob patterns selecting files to leave out

    Returns:
        Ordered list of matching paths

    Raises:
        GlobError: If any pattern is invalid or the filesystem walk fails

    Example:
        >>> match_files("dist/**/*", ["dist/**/*.map"])
        ['dist/app.js', 'dist/index.html']
    """
    matches = expand(include)
    if not exclude:
        return matches

    excluded: Set[str] = set()
    for pattern in exclude:
        excluded.update(_normalize(match) for match in expand(pattern))

    included = [match for match in matches if _normalize(match) not in excluded]
    logger.debug(
        f"Excluded {len(matches) - len(included)} of {len(matches)} matches",
        extra={"include": include, "exclude": list(exclude)},
    )
    return included
