"""Compile a whole directory of spec files into a :class:`~specbind.models.Registry`.

File discovery uses gitignore-compatible pattern matching (via
:mod:`pathspec`), pruning VCS and cache directories. Each file is read and
assembled independently on a thread pool; a file that fails does not stop the
others. Results are merged into the registry serially, in sorted file order,
only after every parse has finished.

The single public function is :func:`parse_all`.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

import pathspec

from specbind.exceptions import DuplicateEndpointError, SpecError, SpecReadError
from specbind.models import CompilerConfig, Endpoint, FileError, Registry, WalkResult
from specbind.parser.assembler import assemble
from specbind.parser.loader import read_spec_file

logger = logging.getLogger(__name__)

# Directories that are always pruned during traversal.
_ALWAYS_SKIP = frozenset({"__pycache__", ".git", ".hg", ".tox", ".mypy_cache", ".ruff_cache"})


def parse_all(
    directory: Union[str, Path],
    config: Optional[CompilerConfig] = None,
) -> WalkResult:
    """Compile every spec file under *directory*.

    Args:
        directory: Root of the spec tree.
        config: Discovery and concurrency settings (``include``,
            ``exclude``, ``workers``). Defaults to :class:`CompilerConfig`.

    Returns:
        A :class:`~specbind.models.WalkResult` holding the registry of every
        file that compiled and a :class:`~specbind.models.FileError` for
        every file that did not, sorted by file identity.

    Raises:
        SpecReadError: If *directory* does not exist or is not a directory.

    Example::

        result = parse_all("rest-api-spec/api")
        for err in result.errors:
            print(f"{err.file}: {err.message}")
        bindings = emit(result.registry)
    """
    root = Path(directory)
    if not root.is_dir():
        raise SpecReadError(f"Spec directory not found: {directory}")
    config = config or CompilerConfig()

    files = discover_spec_files(root, config.include, config.exclude)
    logger.debug("Found %d spec file(s) under %s", len(files), root)

    if config.workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            outcomes = list(pool.map(lambda rel: _compile_file(root, rel), files))
    else:
        outcomes = [_compile_file(root, rel) for rel in files]

    return _merge(outcomes)


def discover_spec_files(
    root: Path,
    include: list[str],
    exclude: Optional[list[str]] = None,
) -> list[str]:
    """List spec files under *root* as sorted POSIX paths relative to it.

    Args:
        root: Directory to walk.
        include: Gitignore-style patterns a file must match.
        exclude: Gitignore-style patterns that remove a file.
    """
    include_spec = pathspec.PathSpec.from_lines("gitwildmatch", include)
    exclude_spec = pathspec.PathSpec.from_lines("gitwildmatch", exclude) if exclude else None

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in _ALWAYS_SKIP]
        rel_dir = Path(dirpath).relative_to(root)
        for fname in filenames:
            rel_path = (rel_dir / fname).as_posix()
            if not include_spec.match_file(rel_path):
                continue
            if exclude_spec and exclude_spec.match_file(rel_path):
                continue
            found.append(rel_path)

    return sorted(found)


def endpoint_name_for(rel_path: str) -> str:
    """Derive an endpoint name from a file identity.

    The name is the file name without its final extension, so
    ``indices/indices.create.json`` becomes ``indices.create``.
    """
    return Path(rel_path).stem


def _compile_file(root: Path, rel_path: str) -> tuple[str, Union[Endpoint, SpecError]]:
    """Read and assemble one file, returning the endpoint or the error."""
    try:
        endpoint = assemble(read_spec_file(root / rel_path))
    except SpecError as exc:
        logger.info("Skipping %s: %s", rel_path, exc)
        return rel_path, exc

    if endpoint.name is None:
        endpoint = endpoint.model_copy(update={"name": endpoint_name_for(rel_path)})
    logger.debug("Compiled %s as %r", rel_path, endpoint.name)
    return rel_path, endpoint


def _merge(outcomes: list[tuple[str, Union[Endpoint, SpecError]]]) -> WalkResult:
    """Fold per-file outcomes into a registry and an error list.

    The first file to claim a name keeps it; later claimants are reported as
    :class:`~specbind.exceptions.DuplicateEndpointError`.
    """
    endpoints: dict[str, Endpoint] = {}
    owners: dict[str, str] = {}
    errors: list[FileError] = []

    for rel_path, outcome in sorted(outcomes, key=lambda item: item[0]):
        if isinstance(outcome, SpecError):
            errors.append(FileError(file=rel_path, error=outcome))
            continue
        name = outcome.name
        assert name is not None  # filled in by _compile_file
        if name in endpoints:
            dup = DuplicateEndpointError(name, first_file=owners[name])
            logger.info("Skipping %s: %s", rel_path, dup)
            errors.append(FileError(file=rel_path, error=dup))
            continue
        endpoints[name] = outcome
        owners[name] = rel_path

    return WalkResult(registry=Registry(endpoints), errors=errors, files=owners)
