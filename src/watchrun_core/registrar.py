"""Recursive directory registration for the watch backend."""

import logging
import os
from pathlib import Path

from watchrun_core.watchers import WatchBackend

logger = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    """Hidden directories are skipped along with everything beneath them."""
    return name.startswith(".")


class DirectoryRegistrar:
    """Registers every non-hidden directory of a tree with a WatchBackend.

    Keeps the set of registered directories (the watch set). Registration is
    idempotent, so re-walking a subtree only adds directories not seen yet.
    Directories are never removed, even after they are deleted on disk.
    """

    def __init__(self, backend: WatchBackend):
        """Initialize registrar.

        Args:
            backend: Backend that receives one add() per directory
        """
        self.backend = backend
        self._watched: set[Path] = set()

    @property
    def watched(self) -> frozenset[Path]:
        """Snapshot of registered directories."""
        return frozenset(self._watched)

    def is_watched(self, path: str | Path) -> bool:
        return Path(path) in self._watched

    def register_tree(self, root: str | Path, include_hidden_root: bool = True) -> list[Path]:
        """Register ``root`` and its non-hidden descendant directories, pre-order.

        Args:
            root: Directory to walk
            include_hidden_root: Register ``root`` even if its own name is hidden

        Returns:
            Directories registered by this call, in walk order

        Raises:
            OSError: If a directory cannot be listed or registered. Directories
                registered before the failure stay registered.
        """
        root = Path(root)
        if not include_hidden_root and is_hidden(root.name):
            logger.debug(f"Skipping hidden directory {root}")
            return []

        added: list[Path] = []

        def _raise(error: OSError) -> None:
            raise error

        for dirpath, dirnames, _ in os.walk(root, topdown=True, onerror=_raise):
            # Prune in place so os.walk never descends into hidden directories
            dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))

            directory = Path(dirpath)
            if directory in self._watched:
                continue
            self.backend.add(directory)
            self._watched.add(directory)
            added.append(directory)

        logger.debug(f"Registered {len(added)} director{'y' if len(added) == 1 else 'ies'} under {root}")
        return added
