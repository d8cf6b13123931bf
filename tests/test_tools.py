"""Tests for my_first_mcp.tools module."""

import json
import os

import pytest

from my_first_mcp.tools import (
    AnalyzeDependenciesTool,
    AnalyzeStructureTool,
    CalculateTool,
    CountLinesTool,
    CurrentTimeTool,
    RandomNumberTool,
    ReverseStringTool,
    ServerInfoTool,
    ServerStatusTool,
    ToolRegistry,
)


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.ts").write_text("// entry\n\nmain();\n", encoding="utf-8")
    (tmp_path / "package.json").write_text(json.dumps({
        "name": "demo",
        "version": "0.1.0",
        "dependencies": {"a": "1.0.0"},
        "devDependencies": {"b": "2.0.0"},
        "scripts": {"deploy": "deploy --token='abc123'"},
    }), encoding="utf-8")
    return str(tmp_path)


class TestCurrentTimeTool:
    def test_execute(self):
        result = CurrentTimeTool().execute()
        assert result.success is True
        assert result.content.startswith("Current time (Asia/Seoul): ")

    def test_custom_default_timezone(self):
        result = CurrentTimeTool(default_timezone="UTC").execute(format="date")
        assert "(UTC)" in result.content

    def test_invalid_timezone(self):
        result = CurrentTimeTool().execute(timezone="Nowhere/Land")
        assert result.success is False
        assert "timezone" in result.error.lower()

    def test_format_enum(self):
        param = {p.name: p for p in CurrentTimeTool().parameters}["format"]
        assert param.enum == ["full", "date", "time"]


class TestCalculateTool:
    def test_execute(self):
        result = CalculateTool().execute(a=15, b=8, operation="multiply")
        assert result.success is True
        assert result.content == "15 × 8 = 120"

    def test_divide_by_zero(self):
        result = CalculateTool().execute(a=1, b=0, operation="divide")
        assert result.success is False
        assert "zero" in result.error


class TestRandomNumberTool:
    def test_single(self):
        result = RandomNumberTool().execute(min=1, max=6)
        assert result.success is True
        assert result.content.startswith("Random number (1~6): ")

    def test_multiple(self):
        result = RandomNumberTool().execute(min=1, max=45, count=6)
        assert result.content.startswith("6 random numbers (1~45): ")
        assert len(result.metadata["numbers"]) == 6

    def test_min_greater_than_max(self):
        assert RandomNumberTool().execute(min=10, max=1).success is False


class TestReverseStringTool:
    def test_execute(self):
        result = ReverseStringTool().execute(text="hello")
        assert result.content == "Original: hello\nReversed: olleh"


class TestServerInfoTools:
    def test_server_info(self):
        tool = ServerInfoTool(lambda: ["calculate", "reverse_string"])
        result = tool.execute()
        assert "1. calculate" in result.content
        assert "2. reverse_string" in result.content

    def test_server_status(self):
        result = ServerStatusTool().execute()
        assert result.content_type == "json"
        assert "uptime" in result.content


class TestCountLinesTool:
    def test_execute(self, project):
        result = CountLinesTool().execute(path=project)
        assert result.success is True
        assert "Files: 2" in result.content
        assert "Total lines: 4" in result.content
        assert ".ts: 1 files, 3 lines" in result.content
        assert result.metadata["byExtension"]["ts"]["commentLines"] == 1

    def test_not_found(self):
        result = CountLinesTool().execute(path="/nonexistent/path")
        assert result.success is False
        assert result.metadata["errorKind"] == "not_found"

    def test_root_relative(self, project):
        result = CountLinesTool(root=project).execute(path="src")
        assert result.success is True
        assert result.metadata["totalFiles"] == 1

    def test_root_traversal(self, project):
        result = CountLinesTool(root=os.path.join(project, "src")).execute(path="..")
        assert result.success is False
        assert "denied" in result.error.lower()


class TestAnalyzeStructureTool:
    def test_execute(self, project):
        result = AnalyzeStructureTool().execute(path=project)
        assert result.success is True
        assert "src/" in result.content
        assert "1 directories, 2 files" in result.content

    def test_max_depth(self, project):
        result = AnalyzeStructureTool().execute(path=project, max_depth=1)
        assert "index.ts" not in result.content

    def test_empty_directory(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = AnalyzeStructureTool().execute(path=str(empty))
        assert result.content == "empty/\n0 directories, 0 files"

    def test_schema(self):
        params = {p.name: p for p in AnalyzeStructureTool().parameters}
        assert params["maxDepth"].minimum == 1
        assert params["maxDepth"].maximum == 10
        assert params["showHidden"].type == "boolean"


class TestAnalyzeDependenciesTool:
    def test_execute(self, project):
        result = AnalyzeDependenciesTool().execute(path=project)
        assert result.success is True
        assert "Package: demo@0.1.0" in result.content
        assert "Dependencies (1):\n  - a: 1.0.0" in result.content
        assert "Dev dependencies (1):" in result.content

    def test_without_dev_dependencies(self, project):
        result = AnalyzeDependenciesTool().execute(path=project, include_dev_deps=False)
        assert "Dev dependencies" not in result.content
        assert "devDependencies" not in result.metadata

    def test_scripts_are_sanitized(self, project):
        result = AnalyzeDependenciesTool().execute(path=project)
        assert "abc123" not in result.content
        assert "[REDACTED]" in result.content

    def test_missing_manifest(self, tmp_path):
        result = AnalyzeDependenciesTool().execute(path=str(tmp_path))
        assert result.success is False
        assert result.metadata["errorKind"] == "manifest_missing"


class TestToolRegistry:
    def make_registry(self):
        registry = ToolRegistry()
        registry.register(CalculateTool())
        registry.register(AnalyzeStructureTool())
        registry.register(CountLinesTool())
        registry.register(ReverseStringTool())
        return registry

    def test_register_and_get(self):
        registry = self.make_registry()
        assert isinstance(registry.get("calculate"), CalculateTool)
        assert registry.get("nonexistent") is None

    def test_unregister(self):
        registry = self.make_registry()
        assert registry.unregister("calculate") is True
        assert registry.unregister("calculate") is False

    def test_list_tools(self):
        names = [t.name for t in self.make_registry().list_tools()]
        assert names == ["calculate", "analyze_structure", "count_lines", "reverse_string"]

    def test_execute(self):
        result = self.make_registry().execute("calculate", {"a": 1, "b": 2, "operation": "add"})
        assert result.success is True
        assert result.content == "1 + 2 = 3"

    def test_execute_not_found(self):
        result = self.make_registry().execute("nonexistent", {})
        assert result.success is False
        assert "not found" in result.error.lower()

    def test_missing_required(self):
        result = self.make_registry().execute("calculate", {"a": 1})
        assert "Missing required parameter" in result.error

    def test_unknown_parameter(self):
        result = self.make_registry().execute("reverse_string", {"text": "a", "upper": True})
        assert "Unknown parameter" in result.error

    def test_invalid_enum(self):
        result = self.make_registry().execute("calculate", {"a": 1, "b": 2, "operation": "pow"})
        assert result.success is False

    def test_empty_text_rejected(self):
        result = self.make_registry().execute("reverse_string", {"text": ""})
        assert result.success is False

    def test_depth_out_of_range(self, project):
        result = self.make_registry().execute("analyze_structure", {"path": project, "maxDepth": 11})
        assert result.success is False
        assert "maxDepth" in result.error

    def test_camel_case_arguments(self, project):
        result = self.make_registry().execute(
            "analyze_structure",
            {"path": project, "maxDepth": 1, "showHidden": False},
        )
        assert result.success is True
        assert "index.ts" not in result.content

    def test_null_means_default(self, project):
        result = self.make_registry().execute("count_lines", {"path": project, "extensions": None})
        assert result.success is True

    def test_extensions_filter(self, project):
        result = self.make_registry().execute("count_lines", {"path": project, "extensions": ["json"]})
        assert set(result.metadata["byExtension"]) == {"json"}

    def test_arguments_must_be_object(self):
        result = self.make_registry().execute("calculate", ["a"])
        assert result.success is False
