"""The path store contract shared by every adapter."""

import json
import logging
from typing import Any, Optional, Sequence

from .domain import Path, StoredItem, path_key
from .exceptions import Corrupt

logger = logging.getLogger(__name__)


class PathStore(object):
    """
    A hierarchical key-value store addressed by paths.

    Every node is either a directory, which has children, or a file, which
    carries a payload. Adapters differ only in where they keep nodes; they
    must agree on the outcome of every operation, including which exception
    is raised.

    Payloads are any JSON-serializable value. They are serialized on the
    way in, so what comes back out of :meth:`get_file` is the JSON
    round-trip of what went in.
    """

    def create_directory(self, path: Sequence[str]) -> None:
        """
        Make sure a directory exists at ``path``.

        Missing ancestors are created first, from the root down. Creating a
        directory that already exists does nothing.

        Raises
        ------
        :class:`.AlreadyExists`
            If a file occupies ``path`` or one of its ancestors.
        :class:`.BackendUnavailable`

        """
        raise NotImplementedError

    def create_file(self, path: Sequence[str], data: Any) -> StoredItem:
        """
        Create a new file at ``path``.

        Raises
        ------
        :class:`.AlreadyExists`
            If a file or directory already occupies ``path``.
        :class:`.ParentMissing`
            If the parent of ``path`` is not a directory.
        :class:`.BackendUnavailable`

        """
        raise NotImplementedError

    def get_file(self, path: Sequence[str]) -> Optional[StoredItem]:
        """
        Read the file at ``path``.

        Returns ``None`` if there is no file at ``path``.

        Raises
        ------
        :class:`.Corrupt`
            If the stored data cannot be decoded.
        :class:`.BackendUnavailable`

        """
        raise NotImplementedError

    def update_file(self, path: Sequence[str], data: Any,
                    expected_version: Optional[int] = None) -> StoredItem:
        """
        Replace the payload of the file at ``path``.

        Parameters
        ----------
        path : sequence of str
        data : object
        expected_version : int or None
            If given, the update only goes through if the stored file is
            still at this version.

        Raises
        ------
        :class:`.NotFound`
            If there is no file at ``path``.
        :class:`.Conflict`
            If ``expected_version`` does not match.
        :class:`.BackendUnavailable`

        """
        raise NotImplementedError

    def delete_file(self, path: Sequence[str]) -> None:
        """
        Remove the file at ``path``. Siblings and ancestors are untouched.

        Raises
        ------
        :class:`.NotFound`
            If there is no file at ``path``.
        :class:`.BackendUnavailable`

        """
        raise NotImplementedError


def dump_payload(data: Any) -> str:
    """Serialize a payload for storage."""
    return json.dumps(data)


def load_payload(path: Path, raw: str) -> Any:
    """Deserialize a stored payload, or raise :class:`.Corrupt`."""
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error('Undecodable payload at %s', path_key(path))
        raise Corrupt(path, e) from e
