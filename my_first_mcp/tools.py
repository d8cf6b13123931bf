"""
MCP Tools implementation.

Wraps the basic, analysis and status functions as MCP tools with declared
parameter schemas, and formats their results as human-readable text.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .advanced import PathTraversalError, get_server_status, sanitize_content, validate_path
from .analyzer import (
    DependencyResult,
    LineCountResult,
    StructureResult,
    analyze_dependencies,
    analyze_structure,
    count_lines,
)
from .basics import (
    DEFAULT_TIMEZONE,
    calculate,
    format_time,
    generate_random_numbers,
    get_server_info,
    reverse_string,
)
from .protocol import Tool, ToolParameter, ToolResult, to_snake_case


logger = logging.getLogger(__name__)


class BaseTool(ABC):
    """Base class for MCP tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        pass

    @property
    @abstractmethod
    def parameters(self) -> List[ToolParameter]:
        """Tool parameters."""
        pass

    @abstractmethod
    def execute(self, **kwargs) -> ToolResult:
        """Execute the tool with given parameters."""
        pass

    def get_definition(self) -> Tool:
        """Get the MCP tool definition."""
        return Tool(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        )

    def validate_params(self, params: Dict[str, Any]) -> Optional[str]:
        """Validate parameters. Returns error message if invalid."""
        declared = {param.name: param for param in self.parameters}

        for name in params:
            if name not in declared:
                return f"Unknown parameter: {name}"

        for param in declared.values():
            if param.name not in params:
                if param.required:
                    return f"Missing required parameter: {param.name}"
                continue
            error = param.validate(params[param.name])
            if error:
                return error
        return None


def _failure(error: str, metadata: Optional[Dict[str, Any]] = None) -> ToolResult:
    return ToolResult(success=False, content="", error=error, metadata=metadata or {})


# ============================================
# Basic tools
# ============================================

class CurrentTimeTool(BaseTool):
    """Report the current date and time in a timezone."""

    def __init__(self, default_timezone: str = DEFAULT_TIMEZONE):
        self.default_timezone = default_timezone

    @property
    def name(self) -> str:
        return "get_current_time"

    @property
    def description(self) -> str:
        return "Return the current date and time, optionally in a given timezone"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="timezone",
                type="string",
                description=f"IANA timezone, e.g. America/New_York (default: {self.default_timezone})",
            ),
            ToolParameter(
                name="format",
                type="string",
                description="Output format: full, date or time (default: full)",
                enum=["full", "date", "time"],
            ),
        ]

    def execute(self, timezone: Optional[str] = None, format: str = "full") -> ToolResult:
        try:
            result = format_time(timezone=timezone or self.default_timezone, fmt=format)
        except ValueError as e:
            return _failure(str(e))

        return ToolResult(
            success=True,
            content=f"Current time ({result.timezone}): {result.formatted}",
            metadata={"timezone": result.timezone},
        )


class CalculateTool(BaseTool):
    """Four-function calculator."""

    @property
    def name(self) -> str:
        return "calculate"

    @property
    def description(self) -> str:
        return "Add, subtract, multiply or divide two numbers"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter("a", "number", "First number", required=True),
            ToolParameter("b", "number", "Second number", required=True),
            ToolParameter(
                name="operation",
                type="string",
                description="Operation: add, subtract, multiply or divide",
                required=True,
                enum=["add", "subtract", "multiply", "divide"],
            ),
        ]

    def execute(self, a: float, b: float, operation: str) -> ToolResult:
        result = calculate(a, b, operation)
        if result.is_error:
            return _failure(result.error_message, {"expression": result.expression})

        return ToolResult(
            success=True,
            content=result.expression,
            metadata={"result": result.result},
        )


class RandomNumberTool(BaseTool):
    """Generate random integers in a range."""

    max_count = 10

    @property
    def name(self) -> str:
        return "get_random_number"

    @property
    def description(self) -> str:
        return "Generate random integers within an inclusive range"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter("min", "integer", "Minimum value", required=True),
            ToolParameter("max", "integer", "Maximum value", required=True),
            ToolParameter(
                name="count",
                type="integer",
                description=f"How many numbers to generate (1-{self.max_count}, default: 1)",
                minimum=1,
                maximum=self.max_count,
            ),
        ]

    def execute(self, min: int, max: int, count: int = 1) -> ToolResult:
        result = generate_random_numbers(int(min), int(max), int(count))
        if result.is_error:
            return _failure(result.error_message)

        numbers = result.numbers
        if len(numbers) == 1:
            text = f"Random number ({result.min}~{result.max}): {numbers[0]}"
        else:
            joined = ", ".join(str(n) for n in numbers)
            text = f"{len(numbers)} random numbers ({result.min}~{result.max}): {joined}"

        return ToolResult(success=True, content=text, metadata={"numbers": numbers})


class ReverseStringTool(BaseTool):
    """Reverse a string."""

    @property
    def name(self) -> str:
        return "reverse_string"

    @property
    def description(self) -> str:
        return "Reverse the given text"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter("text", "string", "Text to reverse", required=True, min_length=1),
        ]

    def execute(self, text: str) -> ToolResult:
        result = reverse_string(text)
        return ToolResult(
            success=True,
            content=f"Original: {result.original}\nReversed: {result.reversed}",
        )


class ServerInfoTool(BaseTool):
    """Describe the server and list its tools."""

    def __init__(self, tool_names: Callable[[], List[str]]):
        self._tool_names = tool_names

    @property
    def name(self) -> str:
        return "get_server_info"

    @property
    def description(self) -> str:
        return "Return server information and the list of available tools"

    @property
    def parameters(self) -> List[ToolParameter]:
        return []

    def execute(self) -> ToolResult:
        info = get_server_info(self._tool_names())
        tool_lines = "\n".join(f"{i}. {name}" for i, name in enumerate(info.tools, 1))
        text = (
            f"=== {info.name} ===\n\n"
            f"Version: {info.version}\n"
            f"Description: {info.description}\n\n"
            f"Available tools:\n{tool_lines}"
        )
        return ToolResult(success=True, content=text)


class ServerStatusTool(BaseTool):
    """Report process uptime and memory."""

    @property
    def name(self) -> str:
        return "get_server_status"

    @property
    def description(self) -> str:
        return "Return server uptime, memory usage and runtime information"

    @property
    def parameters(self) -> List[ToolParameter]:
        return []

    def execute(self) -> ToolResult:
        return ToolResult(
            success=True,
            content=get_server_status().to_dict(),
            content_type="json",
        )


# ============================================
# Analysis tools
# ============================================

class AnalysisTool(BaseTool):
    """
    Base for tools that take a directory path.

    When root is set, paths are resolved relative to it and may not escape it.
    """

    def __init__(self, root: Optional[str] = None, max_entries: Optional[int] = None):
        self.root = root
        self.max_entries = max_entries

    def _path_parameter(self) -> ToolParameter:
        return ToolParameter(
            name="path",
            type="string",
            description="Directory to analyze",
            required=True,
        )

    def _resolve(self, path: str) -> str:
        if self.root is None:
            return path
        return validate_path(self.root, path)

    def execute(self, path: str, **options) -> ToolResult:
        try:
            resolved = self._resolve(path)
        except PathTraversalError as e:
            logger.warning("Rejected path %r: %s", path, e)
            return _failure(f"Access denied: {path}")
        return self.analyze(resolved, **options)

    @abstractmethod
    def analyze(self, path: str, **options) -> ToolResult:
        """Run the analysis on a resolved path."""
        pass


class CountLinesTool(AnalysisTool):

    @property
    def name(self) -> str:
        return "count_lines"

    @property
    def description(self) -> str:
        return "Count code, comment and blank lines in a directory, by file extension"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            self._path_parameter(),
            ToolParameter(
                name="extensions",
                type="array",
                description="Only count these extensions, e.g. [\"ts\", \"py\"]",
                items="string",
            ),
        ]

    def analyze(self, path: str, extensions: Optional[List[str]] = None) -> ToolResult:
        result = count_lines(path, extensions, max_entries=self.max_entries)
        if not result.success:
            return _failure(result.error, result.to_dict())
        return ToolResult(
            success=True,
            content=format_line_count(path, result),
            metadata=result.to_dict(),
        )


class AnalyzeStructureTool(AnalysisTool):

    @property
    def name(self) -> str:
        return "analyze_structure"

    @property
    def description(self) -> str:
        return "Show the directory tree of a project with file and directory counts"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            self._path_parameter(),
            ToolParameter(
                name="maxDepth",
                type="integer",
                description="Number of levels to show (1-10, default: unlimited)",
                minimum=1,
                maximum=10,
            ),
            ToolParameter(
                name="showHidden",
                type="boolean",
                description="Include hidden files and directories (default: false)",
                default=False,
            ),
        ]

    def analyze(
        self,
        path: str,
        max_depth: Optional[int] = None,
        show_hidden: bool = False,
    ) -> ToolResult:
        result = analyze_structure(
            path,
            max_depth=max_depth,
            show_hidden=show_hidden,
            max_entries=self.max_entries,
        )
        if not result.success:
            return _failure(result.error, result.to_dict())
        return ToolResult(
            success=True,
            content=format_structure(result),
            metadata=result.to_dict(),
        )


class AnalyzeDependenciesTool(AnalysisTool):

    @property
    def name(self) -> str:
        return "analyze_dependencies"

    @property
    def description(self) -> str:
        return "List dependencies, dev dependencies and scripts from package.json"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            self._path_parameter(),
            ToolParameter(
                name="includeDevDeps",
                type="boolean",
                description="Include devDependencies (default: true)",
                default=True,
            ),
        ]

    def analyze(self, path: str, include_dev_deps: bool = True) -> ToolResult:
        result = analyze_dependencies(path, include_dev_deps=include_dev_deps)
        if not result.success:
            return _failure(result.error, result.to_dict())
        for script in result.scripts:
            script.command = sanitize_content(script.command)
        return ToolResult(
            success=True,
            content=format_dependencies(result),
            metadata=result.to_dict(),
        )


# ============================================
# Result formatting
# ============================================

def format_line_count(path: str, result: LineCountResult) -> str:
    lines = [
        f"Line count: {path}",
        f"Files: {result.total_files}",
        f"Total lines: {result.total_lines}",
        f"  Code: {result.code_lines}",
        f"  Comments: {result.comment_lines}",
        f"  Blank: {result.blank_lines}",
    ]
    if result.by_extension:
        lines.append("")
        lines.append("By extension:")
        ranked = sorted(result.by_extension.items(), key=lambda item: -item[1].lines)
        for ext, stats in ranked:
            lines.append(
                f"  .{ext}: {stats.files} files, {stats.lines} lines "
                f"(code {stats.code_lines}, comments {stats.comment_lines}, "
                f"blank {stats.blank_lines})"
            )
    return "\n".join(lines)


def format_structure(result: StructureResult) -> str:
    stats = result.stats
    name = os.path.basename(os.path.normpath(result.path)) or result.path
    lines = [f"{name}/"]
    if result.tree:
        lines.append(result.tree.rstrip())
    lines.append(f"{stats.total_dirs} directories, {stats.total_files} files")
    return "\n".join(lines)


def format_dependencies(result: DependencyResult) -> str:
    header = result.name or "(unnamed package)"
    if result.version:
        header += f"@{result.version}"
    lines = [f"Package: {header}"]
    if result.description:
        lines.append(f"Description: {result.description}")

    def section(title: str, entries: List[str]) -> None:
        lines.append("")
        lines.append(f"{title} ({len(entries)}):")
        lines.extend(f"  - {entry}" for entry in entries)

    section("Dependencies", [f"{d.name}: {d.version}" for d in result.dependencies])
    if result.dev_dependencies is not None:
        section("Dev dependencies", [f"{d.name}: {d.version}" for d in result.dev_dependencies])
    section("Scripts", [f"{s.name}: {s.command}" for s in result.scripts])
    return "\n".join(lines)


# ============================================
# Registry
# ============================================

@dataclass
class ToolRegistry:
    """Registry for managing tools."""
    tools: Dict[str, BaseTool] = field(default_factory=dict)

    def register(self, tool: BaseTool) -> None:
        """Register a tool."""
        self.tools[tool.name] = tool

    def unregister(self, name: str) -> bool:
        """Unregister a tool by name."""
        if name in self.tools:
            del self.tools[name]
            return True
        return False

    def get(self, name: str) -> Optional[BaseTool]:
        """Get a tool by name."""
        return self.tools.get(name)

    def names(self) -> List[str]:
        return list(self.tools)

    def list_tools(self) -> List[Tool]:
        """List all registered tools as MCP Tool definitions."""
        return [tool.get_definition() for tool in self.tools.values()]

    def execute(self, name: str, params: Optional[Dict[str, Any]]) -> ToolResult:
        """Validate arguments against the tool schema and execute it."""
        tool = self.get(name)
        if tool is None:
            return _failure(f"Tool not found: {name}")

        if params is not None and not isinstance(params, dict):
            return _failure("Tool arguments must be an object")

        # explicit nulls mean "use the default"
        params = {k: v for k, v in (params or {}).items() if v is not None}

        error = tool.validate_params(params)
        if error:
            return _failure(error)

        logger.debug("Executing tool %s", name)
        return tool.execute(**{to_snake_case(k): v for k, v in params.items()})
