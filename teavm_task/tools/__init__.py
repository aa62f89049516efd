"""Compiler tools driven by teavm-task."""

from teavm_task.tools.base import CompilerTool
from teavm_task.tools.teavm import TeaVMCliTool

__all__ = ["CompilerTool", "TeaVMCliTool"]
