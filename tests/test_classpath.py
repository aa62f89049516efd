"""Tests for the compilation class loader."""

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from teavm_task.classpath import (
    ClasspathLoader,
    ProcessResourceLoader,
    classpath_urls,
    prepare_class_loader,
    to_location,
    url_to_path,
)
from teavm_task.config import ProjectLayout
from teavm_task.errors import ClasspathError


class TestClasspathUrls:

    def test_dependencies_then_artifacts(self, tmp_path):
        a, b, c = tmp_path / "A.jar", tmp_path / "B.jar", tmp_path / "C.jar"

        urls = classpath_urls([a, b], [c])

        assert urls == [a.as_uri(), b.as_uri(), c.as_uri()]

    def test_duplicates_are_kept(self, tmp_path):
        a = tmp_path / "A.jar"

        urls = classpath_urls([a, a], [a])

        assert urls == [a.as_uri()] * 3

    def test_relative_paths_become_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        urls = classpath_urls(["libs/A.jar"], [])

        assert urls == [(tmp_path / "libs" / "A.jar").as_uri()]

    def test_empty(self):
        assert classpath_urls([], []) == []

    def test_malformed_entry_fails_whole_build(self, tmp_path):
        with pytest.raises(ClasspathError, match="Error gathering classpath information") as exc_info:
            classpath_urls([tmp_path / "A.jar"], ["bad\x00name.jar"])
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_non_path_entry_fails(self):
        with pytest.raises(ClasspathError):
            classpath_urls([None], [])

    def test_empty_string_entry_fails(self):
        with pytest.raises(ClasspathError):
            classpath_urls([""], [])


class TestLocations:

    def test_to_location_round_trip(self, tmp_path):
        path = tmp_path / "with space" / "lib.jar"
        assert url_to_path(to_location(path)) == path

    def test_to_location_accepts_bytes(self, tmp_path):
        path = tmp_path / "lib.jar"
        assert to_location(bytes(path)) == path.as_uri()


class TestClasspathLoader:

    def test_finds_class_in_directory(self, tmp_path):
        classes = tmp_path / "classes"
        (classes / "com" / "example").mkdir(parents=True)
        (classes / "com" / "example" / "Main.class").write_bytes(b"\xca\xfe")

        loader = ClasspathLoader([classes.as_uri()], parent=MagicMock())

        assert loader.find_class("com.example.Main") == b"\xca\xfe"

    def test_finds_resource_in_jar(self, tmp_path, make_jar):
        jar = make_jar(tmp_path / "lib.jar", {"META-INF/teavm.properties": "x=1"})

        with ClasspathLoader([jar.as_uri()], parent=MagicMock()) as loader:
            assert loader.find_resource("META-INF/teavm.properties") == b"x=1"

    def test_first_entry_wins(self, tmp_path, make_jar):
        first = make_jar(tmp_path / "first.jar", {"r.txt": "first"})
        second = make_jar(tmp_path / "second.jar", {"r.txt": "second"})

        loader = ClasspathLoader([first.as_uri(), second.as_uri()], parent=MagicMock())

        assert loader.find_resource("r.txt") == b"first"
        loader.close()

    def test_falls_back_to_parent(self, tmp_path):
        parent = MagicMock()
        parent.find_resource.return_value = b"from parent"

        loader = ClasspathLoader([(tmp_path / "missing.jar").as_uri()], parent=parent)

        assert loader.find_resource("x/Y.class") == b"from parent"
        parent.find_resource.assert_called_once_with("x/Y.class")

    def test_default_parent_is_process_loader(self):
        assert isinstance(ClasspathLoader([]).parent, ProcessResourceLoader)

    def test_close_releases_archives(self, tmp_path, make_jar):
        jar = make_jar(tmp_path / "lib.jar", {"r.txt": "data"})
        loader = ClasspathLoader([jar.as_uri()], parent=MagicMock())
        loader.find_resource("r.txt")
        archive = loader._archives[jar]

        loader.close()

        assert loader.closed
        assert archive.fp is None

    def test_close_twice_is_harmless(self):
        loader = ClasspathLoader([])
        loader.close()
        loader.close()
        assert loader.closed

    def test_lookup_after_close_fails(self):
        loader = ClasspathLoader([])
        loader.close()
        with pytest.raises(RuntimeError, match="closed"):
            loader.find_resource("a")

    def test_paths(self, tmp_path):
        a = tmp_path / "A.jar"
        loader = ClasspathLoader([a.as_uri()])
        assert loader.paths == [a]


class TestProcessResourceLoader:

    def test_reads_from_sys_path(self, tmp_path, monkeypatch):
        (tmp_path / "res.txt").write_text("hello")
        monkeypatch.syspath_prepend(str(tmp_path))

        assert ProcessResourceLoader().find_resource("res.txt") == b"hello"

    def test_missing_resource(self):
        assert ProcessResourceLoader().find_resource("no/such/resource-4f1c.txt") is None


class TestPrepareClassLoader:

    def test_uses_runtime_classpath_and_artifacts(self, tmp_path):
        project = ProjectLayout(
            build_dir=tmp_path / "build",
            runtime_classpath=[tmp_path / "A.jar", tmp_path / "B.jar"],
            artifacts=[tmp_path / "C.jar"],
        )

        loader = prepare_class_loader(project)

        assert loader.paths == [tmp_path / "A.jar", tmp_path / "B.jar", tmp_path / "C.jar"]

    def test_logs_urls(self, tmp_path, caplog):
        project = ProjectLayout(build_dir=tmp_path, runtime_classpath=[tmp_path / "A.jar"])

        with caplog.at_level(logging.INFO, logger="teavm_task"):
            prepare_class_loader(project)

        assert "Using classpath URLs" in caplog.text

    def test_passes_parent(self, tmp_path):
        parent = MagicMock()
        loader = prepare_class_loader(ProjectLayout(build_dir=tmp_path), parent=parent)
        assert loader.parent is parent

    def test_malformed_entry(self, tmp_path):
        project = ProjectLayout(build_dir=tmp_path, artifacts=[Path("ok.jar"), "bad\x00.jar"])
        with pytest.raises(ClasspathError):
            prepare_class_loader(project)
