"""
teavm-task - Build task for the TeaVM ahead-of-time compiler

Compiles a project's bytecode into a browser-runnable script and reports
the compiler's problems back to the build.
"""

__version__ = "0.1.0"


__all__ = ["TeaVMTask", "CompilationResult", "TaskSettings", "ProjectLayout", "load_config"]

from .config import ProjectLayout, TaskSettings, load_config
from .task import CompilationResult, TeaVMTask
