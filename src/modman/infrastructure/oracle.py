"""PathOracle — read-only inspection of target and source paths.

INVARIANT: Nothing in this module mutates the filesystem.

Every safety decision downstream depends on telling apart three states:
the path does not exist, the path exists and is not a symlink, and the
path is a symlink (pointing wherever).  ``lstat`` is used for targets so a
dangling symlink still counts as existing.
"""

from __future__ import annotations

import errno
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from modman.domain.errors import IoError, from_os_error

# lstat errors that just mean "nothing there"
_MISSING = (FileNotFoundError, NotADirectoryError)


@dataclass(frozen=True)
class PathState:
    """Snapshot of one path as seen by :meth:`PathOracle.resolve`.

    Attributes:
        path: Absolute path with parent directories resolved.
        exists: Something (file, dir, symlink, dangling or not) is there.
        is_symlink: The entry itself is a symlink.
        symlink_target: Raw link value when ``is_symlink``.
        is_file: Regular file (after following links if requested).
        is_dir: Directory (after following links if requested).
        parent_is_dir: Parent exists and is a directory.
        is_writable_parent: Parent is a directory the user may create
            entries in.
    """

    path: Path
    exists: bool
    is_symlink: bool = False
    symlink_target: Path | None = None
    is_file: bool = False
    is_dir: bool = False
    parent_is_dir: bool = False
    is_writable_parent: bool = False

    @property
    def link_destination(self) -> Path | None:
        """Absolute, normalised form of ``symlink_target``."""
        if self.symlink_target is None:
            return None
        return Path(os.path.normpath(self.path.parent / self.symlink_target))


class PathOracle:
    """Resolves and inspects paths without touching them."""

    def absolute(self, path: Path | str) -> Path:
        """``~``-expanded, absolute, normalised (no symlink resolution)."""
        return Path(os.path.abspath(os.path.expanduser(path)))

    def canonical_target(self, path: Path | str) -> Path:
        """Absolute path with every parent resolved but the last component kept.

        Two spellings of one target (``~/x`` and ``/home/u/./x``, or through
        a symlinked parent directory) canonicalise to the same path, while a
        symlink sitting at the target itself is left unfollowed.
        """
        absolute = self.absolute(path)
        if absolute.parent == absolute:
            return absolute
        return Path(os.path.realpath(absolute.parent)) / absolute.name

    def resolve(self, path: Path | str, *, follow: bool = False) -> PathState:
        """Inspect *path*.

        Args:
            path: Path to inspect.
            follow: Follow a final symlink (used for module sources).

        Raises:
            IoError: When metadata cannot be read for reasons other than
                the path not existing.
            PermissionDenied: When the parent directory cannot be searched.
        """
        target = self.absolute(path) if follow else self.canonical_target(path)
        parent = target.parent
        parent_is_dir = self.is_dir(parent)
        writable = parent_is_dir and os.access(parent, os.W_OK | os.X_OK)

        try:
            st = os.stat(target) if follow else os.lstat(target)
        except _MISSING:
            return PathState(
                path=target,
                exists=False,
                parent_is_dir=parent_is_dir,
                is_writable_parent=writable,
            )
        except OSError as exc:
            msg = f"cannot read metadata of {target}: {exc.strerror or exc}"
            raise IoError(msg, target=target, detail={"errno": exc.errno}) from exc

        link_value: Path | None = None
        if stat.S_ISLNK(st.st_mode):
            try:
                link_value = Path(os.readlink(target))
            except OSError as exc:
                msg = f"cannot read symlink {target}: {exc.strerror or exc}"
                raise IoError(msg, target=target, detail={"errno": exc.errno}) from exc

        return PathState(
            path=target,
            exists=True,
            is_symlink=link_value is not None,
            symlink_target=link_value,
            is_file=stat.S_ISREG(st.st_mode),
            is_dir=stat.S_ISDIR(st.st_mode),
            parent_is_dir=parent_is_dir,
            is_writable_parent=writable,
        )

    def points_at(self, state: PathState, source: Path | str) -> bool:
        """Whether *state* is a symlink owned by *source*.

        Ownership is exact: the link value, made absolute against the
        link's own directory, must equal the absolute source path.
        """
        destination = state.link_destination
        if not state.is_symlink or destination is None:
            return False
        return destination == self.absolute(source)

    def nearest_existing_ancestor(self, path: Path | str) -> Path:
        """Closest ancestor of *path* that exists (``/`` at worst)."""
        current = self.absolute(path).parent
        while not os.path.lexists(current):
            if current.parent == current:
                break
            current = current.parent
        return current

    def is_writable_dir(self, path: Path | str) -> bool:
        return os.path.isdir(path) and os.access(path, os.W_OK | os.X_OK)

    def is_dir(self, path: Path | str) -> bool:
        """Whether *path* is a directory, following symlinks.

        Missing paths, paths running through a regular file and symlink
        loops are simply not directories.  Any other OS error is raised as
        a :class:`ModmanError`.
        """
        try:
            st = os.stat(path)
        except _MISSING:
            return False
        except OSError as exc:
            if exc.errno == errno.ELOOP:
                return False
            raise from_os_error(exc, f"cannot read metadata of {path}", target=Path(path)) from exc
        return stat.S_ISDIR(st.st_mode)
