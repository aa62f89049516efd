"""Tests for teavm-task error classes."""

import pytest

from teavm_task.errors import (
    ClasspathError,
    CompilerToolError,
    ConfigError,
    MissingMainClassError,
    TeaVMTaskError,
)


class TestHierarchy:

    @pytest.mark.parametrize("error_cls", [ConfigError, ClasspathError, CompilerToolError])
    def test_is_task_error(self, error_cls):
        assert issubclass(error_cls, TeaVMTaskError)

    def test_missing_main_class_is_config_error(self):
        assert issubclass(MissingMainClassError, ConfigError)

    def test_classpath_error_is_not_config_error(self):
        assert not issubclass(ClasspathError, ConfigError)


class TestMessages:

    def test_missing_main_class_default_message(self):
        assert str(MissingMainClassError()) == "mainClassName not found!"

    def test_compiler_tool_error_details(self):
        error = CompilerToolError("failed", exit_code=3, stderr="trace")
        assert str(error) == "failed"
        assert error.exit_code == 3
        assert error.stderr == "trace"

    def test_compiler_tool_error_defaults(self):
        error = CompilerToolError("failed")
        assert error.exit_code is None
        assert error.stderr is None
