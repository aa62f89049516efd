import zipfile
from pathlib import Path
from typing import List, Optional

import pytest

from teavm_task.classpath import ClasspathLoader
from teavm_task.config import ProjectLayout, TaskSettings
from teavm_task.diagnostics import Problem, ProblemProvider, ProblemSeverity
from teavm_task.tools.base import CompilerTool


class StubCompiler(CompilerTool):
    """Compiler double: writes the target file and reports canned problems."""

    def __init__(self, problems: Optional[List[Problem]] = None, error: Optional[Exception] = None):
        self.problems = list(problems or [])
        self.error = error
        self.calls = []
        self._provider = ProblemProvider()

    def validate(self):
        return {"valid": True, "errors": [], "warnings": []}

    def generate(self, config, class_loader):
        self.calls.append((config, class_loader))
        if self.error is not None:
            raise self.error
        config.target_directory.mkdir(parents=True, exist_ok=True)
        config.target_file.write_text("// generated\n")
        self._provider = ProblemProvider(self.problems)

    @property
    def problem_provider(self):
        return self._provider


class SpyClassLoader(ClasspathLoader):
    """ClasspathLoader that counts close() calls and can fail on close."""

    def __init__(self, urls=(), close_error: Optional[Exception] = None):
        super().__init__(list(urls))
        self.close_calls = 0
        self.close_error = close_error

    def close(self):
        self.close_calls += 1
        super().close()
        if self.close_error is not None:
            raise self.close_error


def write_jar(path: Path, entries: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return path


@pytest.fixture
def project(tmp_path):
    """Project with one source directory holding two compiled sources."""
    src = tmp_path / "src" / "main" / "kotlin"
    (src / "com" / "example").mkdir(parents=True)
    (src / "com" / "example" / "Main.kt").write_text("fun main() {}\n")
    (src / "com" / "example" / "Main.class").write_bytes(b"\xca\xfe\xba\xbe")
    return ProjectLayout(build_dir=tmp_path / "build", source_dirs=[src])


@pytest.fixture
def settings():
    return TaskSettings(main_class_name="com.example.Main")


@pytest.fixture
def problem():
    def _make(text, severity=ProblemSeverity.ERROR, params=(), location=None):
        return Problem(severity, text, tuple(params), location)
    return _make


@pytest.fixture
def make_jar():
    """Writes a jar archive with the given entries and returns its path."""
    return write_jar


@pytest.fixture
def stub_compiler():
    return StubCompiler


@pytest.fixture
def spy_loader():
    return SpyClassLoader
