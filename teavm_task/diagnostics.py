"""
Compiler problems and their text rendering.

TeaVM reports problems as message templates with typed placeholders
(``{{c0}}`` for a class, ``{{m1}}`` for a method, ``{{f0}}`` for a field,
``{{t0}}`` for a type). A problem renders itself into a consumer, which
decides how each piece is written out. The collector here only turns
problems into plain strings; it does not look at severity.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

REPORT_HEADER = "Problems:"

PLACEHOLDER_PATTERN = re.compile(r"\{\{([cmft])(\d+)\}\}")


class ProblemSeverity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"


@dataclass(frozen=True)
class CallLocation:
    """Method and optional source position where a problem was found."""

    method: str
    file_name: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.file_name is None:
            return self.method
        if self.line is None:
            return f"{self.method}({self.file_name})"
        return f"{self.method}({self.file_name}:{self.line})"


class ProblemTextConsumer:
    """Accumulates the rendered text of a single problem."""

    def __init__(self):
        self._parts: List[str] = []

    def append(self, text: str) -> None:
        self._parts.append(text)

    def append_class(self, class_name: str) -> None:
        self._parts.append(class_name)

    def append_method(self, method: str) -> None:
        self._parts.append(method)

    def append_field(self, field_name: str) -> None:
        self._parts.append(field_name)

    def append_type(self, type_name: str) -> None:
        self._parts.append(type_name)

    def append_location(self, location: CallLocation) -> None:
        self._parts.append(f"\n    at {location}")

    @property
    def text(self) -> str:
        return "".join(self._parts)


@dataclass(frozen=True)
class Problem:
    """One problem reported by the compiler."""

    severity: ProblemSeverity
    text: str
    params: Sequence[str] = ()
    location: Optional[CallLocation] = None

    def render(self, consumer: ProblemTextConsumer) -> None:
        appenders = {
            "c": consumer.append_class,
            "m": consumer.append_method,
            "f": consumer.append_field,
            "t": consumer.append_type,
        }
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(self.text):
            consumer.append(self.text[position:match.start()])
            index = int(match.group(2))
            if index < len(self.params):
                appenders[match.group(1)](str(self.params[index]))
            else:
                consumer.append(match.group(0))
            position = match.end()
        consumer.append(self.text[position:])
        if self.location is not None:
            consumer.append_location(self.location)


@dataclass
class ProblemProvider:
    """Problems reported by one compilation, in reporting order."""

    problems: List[Problem] = field(default_factory=list)

    @property
    def severe_problems(self) -> List[Problem]:
        return [p for p in self.problems if p.severity is ProblemSeverity.ERROR]


def render_problem(problem) -> str:
    consumer = ProblemTextConsumer()
    problem.render(consumer)
    return consumer.text


def collect_diagnostics(problems: Iterable) -> List[str]:
    """Render every problem to text, keeping the compiler's order."""
    return [render_problem(problem) for problem in problems]


def format_report(diagnostics: List[str]) -> Optional[str]:
    """
    Format diagnostics as a report: a header line, then one diagnostic per line.

    Returns:
        The report text, or None when there is nothing to report
    """
    if not diagnostics:
        return None
    return REPORT_HEADER + "\n" + "\n".join(diagnostics)
