"""
Class loader used by the compiler to resolve project classes.

The loader is built from the runtime classpath of the project (dependency
files first, then the project's own published artifacts) and falls back
to the resources visible to this process. It holds open archive handles
and must be closed once compilation is over.
"""

import logging
import os
import sys
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname

from teavm_task.config import ProjectLayout
from teavm_task.errors import ClasspathError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".jar", ".zip")


class ResourceLoader(Protocol):
    """Anything that can look up a resource by its slash-separated name."""

    def find_resource(self, name: str) -> Optional[bytes]:
        ...


class ProcessResourceLoader:
    """Resolves resources from the entries on this process's ``sys.path``."""

    def find_resource(self, name: str) -> Optional[bytes]:
        for entry in sys.path:
            root = Path(entry or os.curdir)
            if root.is_dir():
                candidate = root / name
                if candidate.is_file():
                    return candidate.read_bytes()
            elif root.is_file() and zipfile.is_zipfile(root):
                with zipfile.ZipFile(root) as archive:
                    try:
                        return archive.read(name)
                    except KeyError:
                        continue
        return None


def to_location(entry) -> str:
    """
    Convert a classpath file to an absolute ``file://`` URL.

    Raises:
        ValueError: If the entry is not a usable filesystem path
    """
    try:
        raw = os.fspath(entry)
    except TypeError as e:
        raise ValueError(f"Not a path: {entry!r}") from e
    if isinstance(raw, bytes):
        raw = os.fsdecode(raw)
    if not raw or "\x00" in raw:
        raise ValueError(f"Malformed classpath entry: {raw!r}")
    return Path(raw).absolute().as_uri()


def classpath_urls(dependencies: Iterable, artifacts: Iterable) -> List[str]:
    """
    Build the ordered list of classpath URLs.

    Dependencies come first, then artifacts, each in the order given.
    Duplicates are kept.

    Raises:
        ClasspathError: If any entry cannot be converted
    """
    try:
        dependency_urls = [to_location(f) for f in dependencies]
        artifact_urls = [to_location(f) for f in artifacts]
    except ValueError as e:
        raise ClasspathError("Error gathering classpath information") from e
    return dependency_urls + artifact_urls


def url_to_path(url: str) -> Path:
    """Convert a ``file://`` URL back into a filesystem path."""
    return Path(url2pathname(urlparse(url).path))


class ClasspathLoader:
    """
    Isolated class loader scoped to one compilation.

    Lookups go through the classpath entries in order and then to the
    parent loader. Archives are opened on first use and kept open until
    close().
    """

    def __init__(self, urls: List[str], parent: Optional[ResourceLoader] = None):
        self.urls = list(urls)
        self.parent = parent if parent is not None else ProcessResourceLoader()
        self.closed = False
        self._archives: Dict[Path, zipfile.ZipFile] = {}

    @property
    def paths(self) -> List[Path]:
        """Classpath entries as filesystem paths, in order."""
        return [url_to_path(url) for url in self.urls]

    def _archive(self, path: Path) -> zipfile.ZipFile:
        archive = self._archives.get(path)
        if archive is None:
            archive = zipfile.ZipFile(path)
            self._archives[path] = archive
        return archive

    def find_local_resource(self, name: str) -> Optional[bytes]:
        """Look up a resource on this loader's own classpath only."""
        if self.closed:
            raise RuntimeError("Class loader is closed")

        for path in self.paths:
            if path.is_dir():
                candidate = path / name
                if candidate.is_file():
                    return candidate.read_bytes()
            elif path.is_file() and path.suffix in ARCHIVE_SUFFIXES:
                try:
                    return self._archive(path).read(name)
                except KeyError:
                    continue
        return None

    def find_resource(self, name: str) -> Optional[bytes]:
        """Look up a resource locally, then through the parent loader."""
        data = self.find_local_resource(name)
        if data is not None:
            return data
        return self.parent.find_resource(name)

    def find_class(self, class_name: str) -> Optional[bytes]:
        """Return the bytecode of a class given its binary name."""
        return self.find_resource(class_name.replace(".", "/") + ".class")

    def close(self) -> None:
        """Release open archives. Calling it again is a no-op."""
        if self.closed:
            return
        self.closed = True
        archives, self._archives = self._archives, {}
        for archive in archives.values():
            archive.close()

    def __enter__(self) -> "ClasspathLoader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ClasspathLoader(urls={len(self.urls)}, closed={self.closed})"


def prepare_class_loader(
    project: ProjectLayout,
    parent: Optional[ResourceLoader] = None,
) -> ClasspathLoader:
    """
    Build the compilation class loader for a project.

    Args:
        project: Project layout supplying the runtime classpath and artifacts
        parent: Fallback loader (defaults to this process's resources)

    Returns:
        A new ClasspathLoader; the caller must close it

    Raises:
        ClasspathError: If a classpath entry is malformed
    """
    urls = classpath_urls(project.runtime_classpath, project.artifacts)
    logger.info(
        "Using classpath URLs: %s",
        urls,
        extra={"event": "classpath_prepared", "metadata": {"count": len(urls)}},
    )
    return ClasspathLoader(urls, parent)
