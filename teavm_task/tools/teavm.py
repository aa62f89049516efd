"""TeaVM command-line runner adapter."""

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from teavm_task.classpath import ClasspathLoader
from teavm_task.config import CompilationConfig
from teavm_task.diagnostics import CallLocation, Problem, ProblemProvider, ProblemSeverity
from teavm_task.errors import CompilerToolError
from teavm_task.log_glue import TeaVMLoggerGlue
from teavm_task.tools.base import CompilerTool

RUNNER_CLASS = "org.teavm.cli.TeaVMRunner"

PROBLEM_LINE = re.compile(r"^(ERROR|WARNING): (.*)$")
LOCATION_LINE = re.compile(r"^\s+at (\S+?)(?:\(([^:()]+)(?::(\d+))?\))?\s*$")


def parse_output(lines: List[str], log: Optional[TeaVMLoggerGlue] = None) -> List[Problem]:
    """
    Split runner output into problems and plain log lines.

    ``ERROR: ...`` and ``WARNING: ...`` lines start a problem; an indented
    ``at ...`` line right after one becomes its location. Everything else
    goes to the log.
    """
    problems: List[Problem] = []
    for line in lines:
        line = line.rstrip("\n")
        problem_match = PROBLEM_LINE.match(line)
        if problem_match:
            problems.append(
                Problem(ProblemSeverity(problem_match.group(1)), problem_match.group(2))
            )
            continue

        location_match = LOCATION_LINE.match(line)
        if location_match and problems and problems[-1].location is None:
            last = problems[-1]
            line_number = location_match.group(3)
            problems[-1] = Problem(
                last.severity,
                last.text,
                last.params,
                CallLocation(
                    location_match.group(1),
                    location_match.group(2),
                    int(line_number) if line_number else None,
                ),
            )
            continue

        if log is not None and line.strip():
            log.info(line)
    return problems


class TeaVMCliTool(CompilerTool):
    """
    Runs TeaVM through its command-line runner in a separate JVM.

    The runner jar and the project's classpath go on the JVM classpath;
    compilation options map onto runner flags.
    """

    def __init__(
        self,
        cli_jar: Path,
        java: str = "java",
        jvm_args: Optional[List[str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize TeaVMCliTool.

        Args:
            cli_jar: Path to the teavm-cli jar (with its dependencies)
            java: java executable name or path
            jvm_args: Extra JVM arguments (e.g., ["-Xmx1g"])
            logger: Logger receiving the runner's output
        """
        self.cli_jar = Path(cli_jar)
        self.java = java
        self.jvm_args = list(jvm_args or [])
        self.log = TeaVMLoggerGlue(logger or logging.getLogger("teavm_task.teavm"))
        self._problem_provider = ProblemProvider()

    @property
    def problem_provider(self) -> ProblemProvider:
        return self._problem_provider

    def validate(self) -> Dict[str, Any]:
        errors = []
        warnings = []

        if shutil.which(self.java) is None:
            errors.append(f"java executable not found: {self.java}")

        if not self.cli_jar.exists():
            errors.append(f"TeaVM CLI jar not found: {self.cli_jar}")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "warnings": warnings,
        }

    def build_command(self, config: CompilationConfig, class_loader: ClasspathLoader) -> List[str]:
        """Build the java command line for one compilation."""
        classpath = [str(self.cli_jar)] + [str(p) for p in class_loader.paths]

        cmd = [self.java] + self.jvm_args + [
            "-cp", os.pathsep.join(classpath),
            RUNNER_CLASS,
            "-d", str(config.target_directory),
            "-f", config.target_file_name,
            "-O", config.optimization.cli_value,
        ]
        if config.obfuscate:
            cmd.append("-m")
        if config.generate_source_map:
            cmd.append("-G")
        if config.copy_sources:
            cmd.append("--copy-sources")
        if config.incremental:
            cmd.append("-i")
        cmd += ["-c", str(config.cache_directory)]
        for provider in config.source_providers:
            cmd += ["-s", str(provider.path)]
        cmd.append(config.main_class)
        return cmd

    def generate(self, config: CompilationConfig, class_loader: ClasspathLoader) -> None:
        """
        Run the TeaVM runner and collect its problems.

        Raises:
            CompilerToolError: If java cannot be started, or the runner fails
                without reporting any error
        """
        cmd = self.build_command(config, class_loader)
        self.log.debug(f"Executing: {' '.join(cmd)}")

        config.target_directory.mkdir(parents=True, exist_ok=True)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,  # Don't raise, we'll handle errors
            )
        except FileNotFoundError as e:
            raise CompilerToolError(f"java executable not found: {self.java}") from e

        problems = parse_output(result.stdout.splitlines(), self.log)
        self._problem_provider = ProblemProvider(problems)

        if result.returncode != 0 and not self._problem_provider.severe_problems:
            error_msg = f"TeaVM runner failed with exit code {result.returncode}"
            if result.stderr:
                error_msg += f": {result.stderr[:500]}"
            raise CompilerToolError(
                error_msg, exit_code=result.returncode, stderr=result.stderr
            )

        if result.stderr:
            self.log.debug(f"TeaVM runner stderr: {result.stderr[:500]}")
