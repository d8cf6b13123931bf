"""Tests for my_first_mcp.protocol module."""

import pytest

from my_first_mcp.protocol import (
    MCPMessage,
    MCPRequest,
    MCPResponse,
    MCPError,
    MCPErrorCode,
    Tool,
    ToolParameter,
    ToolResult,
    ResourceTemplate,
    Prompt,
    PromptArgument,
    PromptMessage,
    parse_message,
    to_snake_case,
)


class TestMCPError:
    def test_from_code(self):
        error = MCPError.from_code(MCPErrorCode.PARSE_ERROR, "Parse failed")
        assert error.code == -32700
        assert error.message == "Parse failed"

    def test_to_dict(self):
        error = MCPError(code=-32600, message="Test", data={"detail": "info"})
        d = error.to_dict()
        assert d["code"] == -32600
        assert d["data"]["detail"] == "info"

    def test_to_dict_no_data(self):
        error = MCPError(code=-32600, message="Test")
        assert "data" not in error.to_dict()


class TestMCPMessage:
    def test_to_dict(self):
        msg = MCPMessage(id="abc")
        d = msg.to_dict()
        assert d["jsonrpc"] == "2.0"
        assert d["id"] == "abc"

    def test_to_json(self):
        msg = MCPMessage(id="test")
        assert '"jsonrpc": "2.0"' in msg.to_json()


class TestMCPRequest:
    def test_from_dict(self):
        req = MCPRequest.from_dict({
            "jsonrpc": "2.0",
            "id": 7,
            "method": "tools/call",
            "params": {"name": "calculate"},
        })
        assert req.method == "tools/call"
        assert req.params["name"] == "calculate"
        assert req.id == 7

    def test_from_json(self):
        req = MCPRequest.from_json('{"jsonrpc": "2.0", "id": "1", "method": "ping"}')
        assert req.method == "ping"

    def test_notification(self):
        req = MCPRequest.from_dict({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert req.is_notification is True
        assert "id" not in req.to_dict()


class TestMCPResponse:
    def test_to_dict_success(self):
        d = MCPResponse.success("1", "result").to_dict()
        assert d["result"] == "result"
        assert "error" not in d

    def test_to_dict_failure(self):
        resp = MCPResponse.failure("1", MCPError(code=-32600, message="Error"))
        d = resp.to_dict()
        assert d["error"]["code"] == -32600
        assert "result" not in d

    def test_from_dict_with_error(self):
        resp = MCPResponse.from_dict({
            "jsonrpc": "2.0",
            "id": "1",
            "error": {"code": -32601, "message": "Unknown method"},
        })
        assert resp.error.code == -32601
        assert resp.result is None


class TestToolParameter:
    def test_to_json_schema(self):
        param = ToolParameter(
            name="maxDepth",
            type="integer",
            description="Depth",
            minimum=1,
            maximum=10,
        )
        schema = param.to_json_schema()
        assert schema["type"] == "integer"
        assert schema["minimum"] == 1
        assert schema["maximum"] == 10

    def test_array_schema(self):
        param = ToolParameter("extensions", "array", "Extensions", items="string")
        assert param.to_json_schema()["items"] == {"type": "string"}

    def test_validate_type(self):
        param = ToolParameter("a", "number", "A")
        assert param.validate(1.5) is None
        assert param.validate(3) is None
        assert "number" in param.validate("3")

    def test_bool_is_not_a_number(self):
        param = ToolParameter("count", "integer", "Count")
        assert param.validate(True) is not None

    def test_integral_float_is_integer(self):
        param = ToolParameter("count", "integer", "Count")
        assert param.validate(2.0) is None
        assert param.validate(2.5) is not None

    def test_validate_enum(self):
        param = ToolParameter("format", "string", "Format", enum=["full", "date"])
        assert param.validate("date") is None
        assert "one of" in param.validate("week")

    def test_validate_range(self):
        param = ToolParameter("count", "integer", "Count", minimum=1, maximum=10)
        assert param.validate(0) is not None
        assert param.validate(11) is not None
        assert param.validate(10) is None

    def test_validate_min_length(self):
        param = ToolParameter("text", "string", "Text", min_length=1)
        assert param.validate("") is not None

    def test_validate_items(self):
        param = ToolParameter("extensions", "array", "Extensions", items="string")
        assert param.validate(["ts", "py"]) is None
        assert param.validate(["ts", 1]) is not None


class TestTool:
    def test_to_dict(self):
        tool = Tool(
            name="count_lines",
            description="Count lines",
            parameters=[
                ToolParameter("path", "string", "Directory", required=True),
                ToolParameter("extensions", "array", "Extensions", items="string"),
            ],
        )
        d = tool.to_dict()
        assert d["inputSchema"]["type"] == "object"
        assert set(d["inputSchema"]["properties"]) == {"path", "extensions"}
        assert d["inputSchema"]["required"] == ["path"]


class TestToolResult:
    def test_to_dict(self):
        result = ToolResult(success=True, content="data", content_type="json")
        d = result.to_dict()
        assert d["success"] is True
        assert d["content_type"] == "json"
        assert "error" not in d


class TestResourceTemplate:
    def test_match(self):
        template = ResourceTemplate("help://topic/{topic}", "Help", "Help pages")
        assert template.match("help://topic/tools") == {"topic": "tools"}

    def test_no_match(self):
        template = ResourceTemplate("help://topic/{topic}", "Help", "Help pages")
        assert template.match("help://other/tools") is None
        assert template.match("help://topic/a/b") is None

    def test_to_dict(self):
        d = ResourceTemplate("help://topic/{topic}", "Help", "Help pages").to_dict()
        assert d["uriTemplate"] == "help://topic/{topic}"
        assert d["mimeType"] == "text/plain"


class TestPrompt:
    def test_to_dict(self):
        prompt = Prompt(
            name="explain-code",
            description="Explain",
            arguments=[PromptArgument("code", "Code", required=True)],
        )
        d = prompt.to_dict()
        assert d["arguments"][0] == {"name": "code", "description": "Code", "required": True}

    def test_message_to_dict(self):
        d = PromptMessage(role="user", text="hi").to_dict()
        assert d == {"role": "user", "content": {"type": "text", "text": "hi"}}


class TestHelpers:
    def test_to_snake_case(self):
        assert to_snake_case("maxDepth") == "max_depth"
        assert to_snake_case("includeDevDeps") == "include_dev_deps"
        assert to_snake_case("path") == "path"

    def test_parse_message_request(self):
        msg = parse_message({"jsonrpc": "2.0", "id": "1", "method": "ping"})
        assert isinstance(msg, MCPRequest)

    def test_parse_message_response(self):
        msg = parse_message({"jsonrpc": "2.0", "id": "1", "result": {}})
        assert isinstance(msg, MCPResponse)

    def test_parse_message_from_string(self):
        msg = parse_message('{"jsonrpc": "2.0", "id": "1", "method": "test"}')
        assert isinstance(msg, MCPRequest)

    def test_parse_message_invalid_json(self):
        with pytest.raises(ValueError):
            parse_message("not valid json")

    def test_parse_message_not_object(self):
        with pytest.raises(ValueError):
            parse_message([1, 2, 3])
