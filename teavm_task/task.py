"""
TeaVM compilation task.

Turns the project's sources and runtime classpath into a browser-runnable
script with TeaVM:

    configure → build class loader → generate → collect problems → close loader

The class loader is closed on every path out of generation. A failure to
close it is logged and never changes the outcome of the task.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

from teavm_task.classpath import ClasspathLoader, prepare_class_loader
from teavm_task.config import CompilationConfig, ProjectLayout, TaskSettings
from teavm_task.diagnostics import collect_diagnostics, format_report
from teavm_task.errors import MissingMainClassError
from teavm_task.sources import resolve_source_providers
from teavm_task.tools.base import CompilerTool

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    CONFIGURING = "configuring"
    CONTEXT_BUILDING = "context_building"
    INVOKING = "invoking"
    COLLECTING = "collecting"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CompilationResult:
    """Result of one compilation run."""

    success: bool
    diagnostics: List[str] = field(default_factory=list)
    target_file: Optional[Path] = None
    duration_seconds: float = 0.0
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "success": self.success,
            "diagnostics": list(self.diagnostics),
            "target_file": str(self.target_file) if self.target_file else None,
            "duration_seconds": self.duration_seconds,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
        }


def build_compilation_config(settings: TaskSettings, project: ProjectLayout) -> CompilationConfig:
    """
    Assemble the compilation settings for one run.

    Raises:
        MissingMainClassError: If no main class is configured
    """
    if not settings.main_class_name:
        raise MissingMainClassError()

    providers = resolve_source_providers(project.source_dirs, project.teavm_sources)

    return CompilationConfig(
        main_class=settings.main_class_name,
        target_directory=settings.target_directory(project),
        target_file_name=settings.target_file_name,
        cache_directory=project.cache_directory,
        obfuscate=settings.obfuscate,
        incremental=settings.incremental,
        copy_sources=settings.copy_sources,
        generate_source_map=settings.generate_source_map,
        optimization=settings.optimization,
        source_providers=tuple(providers),
    )


class TeaVMTask:
    """
    Drives one TeaVM compilation.

    Each run() builds its own CompilationConfig and class loader; nothing
    is shared between runs.
    """

    def __init__(
        self,
        settings: TaskSettings,
        project: ProjectLayout,
        tool: CompilerTool,
        class_loader_factory: Callable[[ProjectLayout], ClasspathLoader] = prepare_class_loader,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the task.

        Args:
            settings: Task properties (main class, output, toggles)
            project: Source roots and classpath supplied by the build
            tool: Compiler used for generation
            class_loader_factory: Builds the class loader from the project
            stream: Where the problem report is printed (default: stdout)
        """
        self.settings = settings
        self.project = project
        self.tool = tool
        self.class_loader_factory = class_loader_factory
        self.stream = stream
        self.state = TaskState.CONFIGURING

    def configure(self) -> CompilationConfig:
        """Validate settings, build the compilation config and create the cache directory."""
        self.state = TaskState.CONFIGURING
        config = build_compilation_config(self.settings, self.project)
        try:
            config.cache_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(
                f"Could not create cache directory {config.cache_directory}: {e}",
                extra={"task": "teavm", "event": "cache_dir_failed"},
            )
        logger.debug(
            f"Compiling {config.main_class} into {config.target_file}",
            extra={
                "task": "teavm",
                "event": "configured",
                "metadata": {
                    "sources": [str(p.path) for p in config.source_providers],
                    "optimization": config.optimization.value,
                },
            },
        )
        return config

    def report(self, diagnostics: List[str]) -> None:
        """Print the problem report when there is something to report."""
        text = format_report(diagnostics)
        if text is not None:
            print(text, file=self.stream)

    def _release(self, class_loader: ClasspathLoader) -> None:
        try:
            class_loader.close()
        except Exception as e:
            logger.warning(
                f"Failed to close class loader: {e}",
                extra={"task": "teavm", "event": "cleanup_failed"},
            )

    def run(self) -> CompilationResult:
        """
        Run the compilation.

        Returns:
            CompilationResult with the rendered problems

        Raises:
            MissingMainClassError: If no main class is configured
            ClasspathError: If the class loader cannot be built
            Exception: Whatever the compiler raises, unchanged
        """
        started_at = datetime.utcnow()
        start_time = time.time()

        try:
            config = self.configure()

            self.state = TaskState.CONTEXT_BUILDING
            class_loader = self.class_loader_factory(self.project)
        except Exception:
            self.state = TaskState.FAILED
            raise

        failed = True
        try:
            self.state = TaskState.INVOKING
            logger.info(
                f"Running TeaVM for {config.main_class}",
                extra={"task": "teavm", "event": "teavm_started"},
            )
            self.tool.generate(config, class_loader)

            self.state = TaskState.COLLECTING
            diagnostics = collect_diagnostics(self.tool.problem_provider.problems)
            self.report(diagnostics)
            failed = False
        finally:
            self.state = TaskState.CLEANUP
            self._release(class_loader)
            self.state = TaskState.FAILED if failed else TaskState.DONE

        duration = time.time() - start_time
        logger.info(
            f"TeaVM finished in {duration:.1f}s with {len(diagnostics)} problem(s)",
            extra={
                "task": "teavm",
                "event": "teavm_completed",
                "metadata": {"problems": len(diagnostics)},
            },
        )

        return CompilationResult(
            success=True,
            diagnostics=diagnostics,
            target_file=config.target_file,
            duration_seconds=duration,
            started_at=started_at,
            ended_at=datetime.utcnow(),
        )
