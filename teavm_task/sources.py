"""
Source file providers for TeaVM.

TeaVM reads Java/Kotlin sources to build source maps and to copy sources
next to the generated script. Each source root is either a directory tree
or a jar archive. Classification is by path only: a regular file whose
name ends with ``.jar`` is an archive, anything else is a directory.
A missing path is not an error here; it only shows up when the compiler
tries to read from it.
"""

import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

ARCHIVE_SUFFIX = ".jar"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class SourceProvider(ABC):
    """A place compilable source material can be read from."""

    path: Path

    kind = "source"

    @abstractmethod
    def read(self, name: str) -> Optional[bytes]:
        """
        Read a source file by its path relative to the provider root.

        Returns:
            File contents, or None if the provider has no such file
        """
        pass


@dataclass(frozen=True)
class ArchiveSource(SourceProvider):
    """Sources packed into a jar archive."""

    kind = "archive"

    def read(self, name: str) -> Optional[bytes]:
        if not self.path.is_file():
            return None
        with zipfile.ZipFile(self.path) as archive:
            try:
                return archive.read(name)
            except KeyError:
                return None


@dataclass(frozen=True)
class DirectorySource(SourceProvider):
    """Sources laid out in a directory tree."""

    kind = "directory"

    def read(self, name: str) -> Optional[bytes]:
        candidate = self.path / name
        if not candidate.is_file():
            return None
        return candidate.read_bytes()


def classify_source(path: PathLike) -> SourceProvider:
    """Classify one source root as an archive or a directory."""
    path = Path(path)
    if path.is_file() and path.name.endswith(ARCHIVE_SUFFIX):
        return ArchiveSource(path)
    return DirectorySource(path)


def resolve_source_providers(*path_groups: Iterable[PathLike]) -> List[SourceProvider]:
    """
    Turn ordered groups of source roots into ordered source providers.

    Groups are concatenated in the order given, so callers pass the main
    source set directories first and auxiliary sources after them.

    Args:
        *path_groups: Iterables of directory or archive paths

    Returns:
        One provider per input path, in input order
    """
    return [classify_source(path) for group in path_groups for path in group]
