"""Base class for compiler tools."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from teavm_task.classpath import ClasspathLoader
from teavm_task.config import CompilationConfig
from teavm_task.diagnostics import ProblemProvider


class CompilerTool(ABC):
    """
    Base class for compiler tools.

    A compiler tool takes a fully assembled CompilationConfig and a class
    loader able to resolve the project's classes, writes the output files,
    and exposes the problems it found through ``problem_provider``.
    """

    @abstractmethod
    def validate(self) -> Dict[str, Any]:
        """
        Validate the tool's setup.

        Returns:
            Dictionary with keys:
                - 'valid': bool indicating if validation passed
                - 'errors': list of error messages (empty if valid)
                - 'warnings': list of warning messages (optional)
        """
        pass

    @abstractmethod
    def generate(self, config: CompilationConfig, class_loader: ClasspathLoader) -> None:
        """
        Run the compilation. Blocks until the compiler is done.

        Args:
            config: Compilation settings and source providers
            class_loader: Loader for the project's runtime classpath

        Raises:
            Exception: Any failure of the compiler itself
        """
        pass

    @property
    @abstractmethod
    def problem_provider(self) -> ProblemProvider:
        """Problems reported by the last call to generate()."""
        pass
