"""Paths and stored items."""

import unicodedata
from typing import Any, NamedTuple, Sequence, Tuple

from .exceptions import InvalidPath

SEPARATOR = '/'

MAX_SEGMENT_BYTES = 255
"""Longest segment, in UTF-8 bytes; the usual limit on a file name."""

Path = Tuple[str, ...]
"""An ordered sequence of segments. The root is the empty tuple."""

ROOT: Path = ()


class StoredItem(NamedTuple):
    """The result of reading a file."""

    path: Path
    """Where the file lives."""

    data: Any
    """The payload. Any JSON-serializable value, usually a string."""

    version: int = 1
    """Starts at 1 and is incremented by every update."""


def to_path(segments: Sequence[str]) -> Path:
    """
    Normalize a sequence of segments into a :data:`Path`.

    Parameters
    ----------
    segments : sequence of str

    Returns
    -------
    tuple

    Raises
    ------
    :class:`.InvalidPath`
        If ``segments`` is a bare string, or any segment is empty, is not a
        string, contains the separator or a control character, is ``.`` or
        ``..``, or is longer than :data:`MAX_SEGMENT_BYTES` in UTF-8.

    """
    if isinstance(segments, (str, bytes)):
        raise InvalidPath(f'Expected a sequence of segments, got {segments!r}')
    path = tuple(segments)
    for segment in path:
        if not isinstance(segment, str) or not segment:
            raise InvalidPath(f'Bad segment {segment!r} in {path!r}')
        if SEPARATOR in segment or segment in ('.', '..'):
            raise InvalidPath(f'Bad segment {segment!r} in {path!r}')
        if has_control_character(segment):
            raise InvalidPath(f'Control character in {segment!r}')
        try:
            size = len(segment.encode('utf-8'))
        except UnicodeEncodeError as e:
            raise InvalidPath(f'Not encodable: {segment!r}') from e
        if size > MAX_SEGMENT_BYTES:
            raise InvalidPath(f'Segment longer than {MAX_SEGMENT_BYTES} '
                              f'bytes: {segment[:32]!r}...')
    return path


def has_control_character(value: str) -> bool:
    """Whether ``value`` contains NUL or any other control character."""
    return any(unicodedata.category(char) == 'Cc' for char in value)


def path_key(path: Path) -> str:
    """Render a path as a single separator-joined string."""
    return SEPARATOR.join(path)


def parent_of(path: Path) -> Path:
    """Get the path of the directory containing ``path``."""
    if not path:
        raise InvalidPath('The root has no parent')
    return path[:-1]


def ancestors(path: Path) -> Tuple[Path, ...]:
    """Every non-root prefix of ``path``, shortest first, including itself."""
    return tuple(path[:i] for i in range(1, len(path) + 1))
