"""
Thin layer over GitPython: every function here takes an open `Repo` except
`open_repository`, which scopes one and closes it again, and
`commit_modified_files`, which builds the records for one commit.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Optional, Union

from git import Repo, Blob, Tree, Diff
from git.util import hex_to_bin

from driller.config import DrillerConfig, load_config

EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

# Diff paths use this instead of a real path for the missing side.
DEV_NULL = "/dev/null"

PathLike = Union[str, Path]
TreeRef = Union[Tree, str]


@contextmanager
def open_repository(path: PathLike) -> Generator[Repo, None, None]:
    """
    Opens the repository at `path` and closes it when the block exits.
    Raises NoSuchPathError / InvalidGitRepositoryError if it cannot be opened.
    """
    logging.debug(f"Opening repository {path}")
    repo = Repo(path)
    try:
        yield repo
    finally:
        repo.close()
        logging.debug(f"Closed repository {path}")


def _tree_sha(tree: TreeRef) -> str:
    return tree.hexsha if isinstance(tree, Tree) else str(tree)


def rebind_tree(repo: Repo, tree: TreeRef) -> Tree:
    """Looks up a tree (possibly from another Repo instance) in `repo`."""
    return repo.tree(_tree_sha(tree))


def resolve_tree(repo: Repo, commit_id: str) -> Tree:
    return repo.commit(commit_id).tree


def find_blob(repo: Repo, tree: TreeRef, path: str) -> Optional[str]:
    """Returns the hexsha of the blob at `path` in `tree`, or None if there is none."""
    if not path:
        return None
    tree = rebind_tree(repo, tree)
    try:
        # Trees always use forward slashes
        obj = tree[path.replace('\\', '/')]
    except KeyError:
        return None
    if not isinstance(obj, Blob):
        logging.warning(f"Path '{path}' in tree {tree.hexsha} is not a blob ({obj.type})")
        return None
    return obj.hexsha


def read_blob_bytes(repo: Repo, hexsha: str) -> bytes:
    return repo.odb.stream(hex_to_bin(hexsha)).read()


def change_paths(change: Diff) -> List[str]:
    """Paths touched by a change, old side first, without duplicates."""
    paths: List[str] = []
    for path in (change.a_path, change.b_path):
        if path and path != DEV_NULL and path not in paths:
            paths.append(path)
    return paths


def format_diff(repo: Repo, change: Diff, parent: Optional[str], tree: TreeRef,
                config: Optional[DrillerConfig] = None) -> str:
    """
    Unified diff text of a single change, as `git diff` prints it, between
    `parent` (or the empty tree for a root commit) and `tree`.
    """
    config = config or load_config()
    base = parent if parent is not None else EMPTY_TREE_SHA
    target = _tree_sha(tree)
    paths = change_paths(change)

    options = config.diff_options()
    if change.change_type == 'C' or change.copied_file:
        options["find_copies"] = True

    logging.debug(f"Formatting diff {base}..{target} for {paths}")
    output = repo.git.diff(
        base, target, '--', *paths,
        no_color=True,
        no_ext_diff=True,
        src_prefix='a/',
        dst_prefix='b/',
        stdout_as_string=False,
        strip_newline_in_stdout=False,
        **options,
    )
    return config.decode(output)


def commit_modified_files(path: PathLike, rev: str = "HEAD",
                          config: Optional[DrillerConfig] = None) -> List["ModifiedFile"]:
    """
    Builds one ModifiedFile per change in `rev`, compared with its first
    parent (or the empty tree if it has none).
    """
    from driller.modified_file import ModifiedFile

    config = config or load_config()
    with open_repository(path) as repo:
        commit = repo.commit(rev)
        if commit.parents:
            parent: Optional[str] = commit.parents[0].hexsha
            diffs = commit.parents[0].diff(commit, create_patch=False)
        else:
            parent = None
            diffs = repo.tree(EMPTY_TREE_SHA).diff(commit.tree, create_patch=False)

        logging.debug(f"Commit {commit.hexsha} has {len(diffs)} changes")
        return [
            ModifiedFile(diff, Path(repo.working_tree_dir or path), commit.tree, parent, config=config)
            for diff in diffs
        ]
