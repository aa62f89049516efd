"""
Configuration management for teavm-task.

Loads the teavm.yaml build description: the project layout supplied by the
build (source roots, classpath, artifacts) and the task settings passed
through to TeaVM.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from teavm_task.errors import ConfigError
from teavm_task.sources import SourceProvider

DEFAULT_CONFIG_FILE = "teavm.yaml"
CONFIG_ENV_VAR = "TEAVM_TASK_CONFIG"


class OptimizationLevel(str, Enum):
    """TeaVM optimization tiers."""
    SIMPLE = "SIMPLE"
    ADVANCED = "ADVANCED"
    FULL = "FULL"

    @classmethod
    def parse(cls, value: Any) -> "OptimizationLevel":
        """Parse a level name case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            choices = ", ".join(level.value for level in cls)
            raise ConfigError(
                f"Invalid optimization level {value!r} (expected one of: {choices})"
            )

    @property
    def cli_value(self) -> str:
        """Numeric level understood by the TeaVM command-line runner."""
        return {"SIMPLE": "1", "ADVANCED": "2", "FULL": "3"}[self.value]


@dataclass
class ProjectLayout:
    """
    Inputs supplied by the enclosing build.

    Paths keep the order in which the build declared them.
    """

    build_dir: Path
    source_dirs: List[Path] = field(default_factory=list)
    teavm_sources: List[Path] = field(default_factory=list)
    runtime_classpath: List[Path] = field(default_factory=list)
    artifacts: List[Path] = field(default_factory=list)

    @property
    def cache_directory(self) -> Path:
        return self.build_dir / "teavm-cache"

    @property
    def default_install_directory(self) -> Path:
        return self.build_dir / "teavm"


@dataclass
class TaskSettings:
    """Task properties with their defaults."""

    main_class_name: Optional[str] = None
    install_directory: Optional[Path] = None
    target_file_name: str = "app.js"
    copy_sources: bool = False
    generate_source_map: bool = False
    obfuscate: bool = True
    incremental: bool = True
    optimization: OptimizationLevel = OptimizationLevel.ADVANCED

    def target_directory(self, project: ProjectLayout) -> Path:
        """Output directory, defaulting to <build_dir>/teavm."""
        if self.install_directory is not None:
            return Path(self.install_directory)
        return project.default_install_directory


@dataclass(frozen=True)
class CompilationConfig:
    """Everything TeaVM needs for one compilation run."""

    main_class: str
    target_directory: Path
    target_file_name: str
    cache_directory: Path
    obfuscate: bool
    incremental: bool
    copy_sources: bool
    generate_source_map: bool
    optimization: OptimizationLevel
    source_providers: Tuple[SourceProvider, ...] = ()

    @property
    def target_file(self) -> Path:
        return self.target_directory / self.target_file_name


@dataclass
class TaskConfig:
    """Complete teavm.yaml configuration."""

    settings: TaskSettings
    project: ProjectLayout
    logging: Dict[str, Any] = field(default_factory=dict)
    config_path: Optional[Path] = None

    def get_log_level(self) -> str:
        """Get logging level."""
        return str(self.logging.get("level", "INFO")).upper()

    def get_log_format(self) -> str:
        """Get log format (structured or pretty)."""
        return self.logging.get("format", "pretty")

    def should_log_to_console(self) -> bool:
        """Check if console logging is enabled."""
        return self.logging.get("console", True)

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path with date interpolation, if file logging is on."""
        output = self.logging.get("output")
        if not output:
            return None
        output = output.replace("{date}", datetime.now().strftime("%Y-%m-%d"))
        return Path(output)


def _as_bool(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"teavm.{key} must be true or false, got {value!r}")
    return value


def _as_path_list(section: Dict[str, Any], key: str, base_dir: Path) -> List[Path]:
    value = section.get(key) or []
    if isinstance(value, (str, Path)):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"project.{key} must be a list of paths")
    return [_resolve(base_dir, entry) for entry in value]


def _resolve(base_dir: Path, entry: Any) -> Path:
    path = Path(str(entry)).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def parse_config(raw: Dict[str, Any], base_dir: Path) -> TaskConfig:
    """
    Build a TaskConfig from a parsed YAML document.

    Args:
        raw: Parsed YAML mapping
        base_dir: Directory relative paths are resolved against

    Raises:
        ConfigError: If a value has the wrong type
    """
    project_data = raw.get("project") or {}
    teavm_data = raw.get("teavm") or {}
    if not isinstance(project_data, dict) or not isinstance(teavm_data, dict):
        raise ConfigError("'project' and 'teavm' sections must be mappings")

    project = ProjectLayout(
        build_dir=_resolve(base_dir, project_data.get("build_dir", "build")),
        source_dirs=_as_path_list(project_data, "source_dirs", base_dir),
        teavm_sources=_as_path_list(project_data, "teavm_sources", base_dir),
        runtime_classpath=_as_path_list(project_data, "runtime_classpath", base_dir),
        artifacts=_as_path_list(project_data, "artifacts", base_dir),
    )

    install_directory = teavm_data.get("install_directory")
    main_class_name = teavm_data.get("main_class_name")

    settings = TaskSettings(
        main_class_name=str(main_class_name) if main_class_name is not None else None,
        install_directory=_resolve(base_dir, install_directory) if install_directory else None,
        target_file_name=str(teavm_data.get("target_file_name", "app.js")),
        copy_sources=_as_bool(teavm_data, "copy_sources", False),
        generate_source_map=_as_bool(teavm_data, "generate_source_map", False),
        obfuscate=_as_bool(teavm_data, "obfuscate", True),
        incremental=_as_bool(teavm_data, "incremental", True),
        optimization=OptimizationLevel.parse(teavm_data.get("optimization", "ADVANCED")),
    )

    return TaskConfig(
        settings=settings,
        project=project,
        logging=raw.get("logging") or {},
    )


def load_config(config_path: Optional[Path] = None) -> TaskConfig:
    """
    Load task configuration from a YAML file.

    Args:
        config_path: Path to config file. Defaults to $TEAVM_TASK_CONFIG,
            then ./teavm.yaml

    Returns:
        TaskConfig instance

    Raises:
        ConfigError: If config is invalid or missing
    """
    if config_path is None:
        config_path = Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not raw:
        raise ConfigError("Configuration file is empty")
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must contain a mapping")

    config = parse_config(raw, config_path.resolve().parent)
    config.config_path = config_path
    return config
