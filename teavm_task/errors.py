"""
Error classes for teavm-task.

Error handling contract:
- ConfigError and its subclasses are raised before any classpath is built
- ClasspathError is raised while building the compilation class loader
- Errors raised by the compiler itself propagate unchanged
- Errors raised while releasing the class loader are logged, never raised
"""

from typing import Optional


class TeaVMTaskError(Exception):
    """Base exception for teavm-task."""
    pass


class ConfigError(TeaVMTaskError):
    """Configuration validation error."""
    pass


class MissingMainClassError(ConfigError):
    """
    The entry point class was not configured.

    TeaVM needs the fully-qualified name of the class whose ``main`` method
    starts the program. Raised before any compilation work begins.
    """

    def __init__(self, message: str = "mainClassName not found!"):
        super().__init__(message)


class ClasspathError(TeaVMTaskError):
    """
    A runtime classpath entry could not be turned into a loadable location.

    The original error is chained as ``__cause__``.
    """
    pass


class CompilerToolError(TeaVMTaskError):
    """
    The compiler process itself failed.

    Examples:
    - java executable not found
    - TeaVM runner exited non-zero without reporting any problem
    """

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
