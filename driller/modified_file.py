from typing import Any, Dict, List, Optional, Tuple
from enum import Enum
from pathlib import Path, PurePosixPath
import logging

from git import Diff, Tree

from driller.config import DrillerConfig, load_config
from driller.diff_parser import parse_diff, count_changed_lines
from driller.git_repository import (
    DEV_NULL,
    PathLike,
    open_repository,
    format_diff,
    resolve_tree,
    find_blob,
    read_blob_bytes,
)

################################################################################
# Modification Type
################################################################################

class ModificationType(Enum):
    """Type of modification: ADD, COPY, RENAME, DELETE, MODIFY or UNKNOWN."""
    ADD = 1
    COPY = 2
    RENAME = 3
    DELETE = 4
    MODIFY = 5
    UNKNOWN = 6


_CHANGE_TYPES: Dict[str, ModificationType] = {
    'A': ModificationType.ADD,
    'C': ModificationType.COPY,
    'R': ModificationType.RENAME,
    'D': ModificationType.DELETE,
    'M': ModificationType.MODIFY,
}


def modification_type_of(diff: Diff) -> ModificationType:
    """
    Maps a change to its ModificationType. Patch-mode diffs carry no change
    type letter, so the flags are used for those. Anything else is UNKNOWN.
    """
    change_type = diff.change_type
    if change_type is not None:
        return _CHANGE_TYPES.get(change_type, ModificationType.UNKNOWN)

    if diff.new_file:     return ModificationType.ADD
    if diff.deleted_file: return ModificationType.DELETE
    if diff.renamed_file: return ModificationType.RENAME
    if getattr(diff, 'copied_file', False): return ModificationType.COPY
    return ModificationType.UNKNOWN

################################################################################
# Modified File
################################################################################

class ModifiedFile:
    """
    One file's change inside a commit.

    Paths and the change type come straight from the change descriptor.
    Everything else (diff text, parsed diff, contents) reopens the
    repository at `project_path` on each access and is never cached.
    """

    def __init__(self, change: Diff, project_path: PathLike, tree: Tree,
                 parent: Optional[str], config: Optional[DrillerConfig] = None) -> None:
        self._change = change
        self._project_path = Path(project_path)
        self._tree = tree
        self._parent = parent
        self._config = config or load_config()

        # Filled in by a source code analyzer, if one is run.
        self.nloc: Optional[int] = None
        self.complexity: Optional[int] = None
        self.token_count: Optional[int] = None
        self.methods: List[Any] = []
        self.methods_before: List[Any] = []

    @property
    def change(self) -> Diff:
        return self._change

    @property
    def project_path(self) -> Path:
        return self._project_path

    @property
    def tree(self) -> Tree:
        return self._tree

    @property
    def parent(self) -> Optional[str]:
        return self._parent

    @property
    def change_type(self) -> ModificationType:
        return modification_type_of(self._change)

    @property
    def old_path(self) -> Optional[str]:
        """Old path of the file. None if the file was added."""
        if self._change.new_file:
            return None
        path = self._change.a_path
        if path is None or path == DEV_NULL:
            return None
        return path

    @property
    def new_path(self) -> Optional[str]:
        """New path of the file. None if the file was deleted."""
        if self._change.deleted_file:
            return None
        path = self._change.b_path
        if path is None or path == DEV_NULL:
            return None
        return path

    @property
    def filepath(self) -> str:
        path = self.new_path if self.new_path is not None else self.old_path
        assert path is not None, f"Change has neither an old nor a new path: {self._change!r}"
        return path

    @property
    def filename(self) -> str:
        """
        Last component of the path, e.g. "src/app/main.py" -> "main.py".
        Git always uses forward slashes, regardless of the platform.
        """
        return PurePosixPath(self.filepath).name

    ############################################################################
    # Diff
    ############################################################################

    @property
    def diff(self) -> str:
        with open_repository(self._project_path) as repo:
            return format_diff(repo, self._change, self._parent, self._tree, self._config)

    @property
    def diff_parsed(self) -> Dict[str, List[Tuple[int, str]]]:
        """
        {"deleted": [(line, content), ...], "added": [(line, content), ...]}
        with line numbers in the old and new file respectively.
        """
        return parse_diff(self.diff)

    @property
    def added_lines(self) -> int:
        added, _ = count_changed_lines(self.diff)
        return added

    @property
    def deleted_lines(self) -> int:
        _, deleted = count_changed_lines(self.diff)
        return deleted

    ############################################################################
    # Content
    ############################################################################

    def _read_content(self, path: str, before: bool) -> Optional[bytes]:
        with open_repository(self._project_path) as repo:
            if before and self._parent is not None:
                tree = resolve_tree(repo, self._parent)
            else:
                tree = self._tree

            hexsha = find_blob(repo, tree, path)
            if hexsha is None:
                logging.debug(f"{path} not found in tree {tree.hexsha}")
                return None
            return read_blob_bytes(repo, hexsha)

    @property
    def content_before(self) -> Optional[bytes]:
        if self.change_type == ModificationType.ADD:
            return None
        return self._read_content(self.old_path or self.filepath, before=True)

    @property
    def content(self) -> Optional[bytes]:
        if self.change_type == ModificationType.DELETE:
            return None
        return self._read_content(self.new_path or self.filepath, before=False)

    @property
    def source_code_before(self) -> Optional[str]:
        data = self.content_before
        return self._config.decode(data) if data is not None else None

    @property
    def source_code(self) -> Optional[str]:
        data = self.content
        return self._config.decode(data) if data is not None else None

    ############################################################################

    def _identity(self) -> Tuple[Optional[str], Optional[str], ModificationType, str, Optional[str]]:
        return (self.old_path, self.new_path, self.change_type, self._tree.hexsha, self._parent)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ModifiedFile):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        return f"ModifiedFile(filepath={self.filepath}, change_type={self.change_type.name})"
