"""
MCP Protocol definitions.

Implements the Model Context Protocol message types and the tool, resource
and prompt definitions the server advertises.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


PROTOCOL_VERSION = "2024-11-05"


class MCPErrorCode(Enum):
    """Standard MCP error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # Custom error codes
    TOOL_NOT_FOUND = -32000
    TOOL_EXECUTION_ERROR = -32001
    RESOURCE_NOT_FOUND = -32002
    TIMEOUT = -32003
    PROMPT_NOT_FOUND = -32004


@dataclass
class MCPError:
    """MCP Error object."""
    code: int
    message: str
    data: Optional[Any] = None

    @classmethod
    def from_code(cls, code: MCPErrorCode, message: str, data: Any = None) -> "MCPError":
        return cls(code=code.value, message=message, data=data)

    def to_dict(self) -> dict:
        result = {"code": self.code, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result


class MCPProtocolError(Exception):
    """Raised by method handlers to answer with a JSON-RPC error."""

    def __init__(self, code: MCPErrorCode, message: str, data: Any = None):
        super().__init__(message)
        self.error = MCPError.from_code(code, message, data)


@dataclass
class MCPMessage:
    """Base MCP message."""
    jsonrpc: str = "2.0"
    id: Optional[Union[str, int]] = None

    def to_dict(self) -> dict:
        result = {"jsonrpc": self.jsonrpc}
        if self.id is not None:
            result["id"] = self.id
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "MCPMessage":
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            id=data.get("id"),
        )


@dataclass
class MCPRequest(MCPMessage):
    """MCP Request message. A request without an id is a notification."""
    method: str = ""
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["method"] = self.method
        if self.params is not None:
            result["params"] = self.params
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "MCPRequest":
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            id=data.get("id"),
            method=data.get("method", ""),
            params=data.get("params"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "MCPRequest":
        return cls.from_dict(json.loads(json_str))


@dataclass
class MCPResponse(MCPMessage):
    """MCP Response message."""
    result: Optional[Any] = None
    error: Optional[MCPError] = None

    def to_dict(self) -> dict:
        result = super().to_dict()
        # responses always carry an id, null when the request id was unreadable
        result.setdefault("id", None)
        if self.error is not None:
            result["error"] = self.error.to_dict()
        else:
            result["result"] = self.result
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "MCPResponse":
        error = data.get("error")
        if isinstance(error, dict):
            error = MCPError(
                code=error.get("code", MCPErrorCode.INTERNAL_ERROR.value),
                message=error.get("message", ""),
                data=error.get("data"),
            )
        else:
            error = None
        return cls(
            jsonrpc=data.get("jsonrpc", "2.0"),
            id=data.get("id"),
            result=data.get("result"),
            error=error,
        )

    @classmethod
    def success(cls, id: Optional[Union[str, int]], result: Any) -> "MCPResponse":
        return cls(id=id, result=result)

    @classmethod
    def failure(cls, id: Optional[Union[str, int]], error: MCPError) -> "MCPResponse":
        return cls(id=id, error=error)


JSON_TYPES = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


@dataclass
class ToolParameter:
    """Tool parameter definition."""
    name: str
    type: str
    description: str
    required: bool = False
    default: Optional[Any] = None
    enum: Optional[List[Any]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = None
    items: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "required": self.required,
        }
        if self.default is not None:
            result["default"] = self.default
        if self.enum is not None:
            result["enum"] = self.enum
        return result

    def to_json_schema(self) -> dict:
        """Convert to JSON schema property."""
        schema = {
            "type": self.type,
            "description": self.description,
        }
        if self.enum is not None:
            schema["enum"] = self.enum
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.items is not None:
            schema["items"] = {"type": self.items}
        return schema

    def validate(self, value: Any) -> Optional[str]:
        """Check a value against this parameter. Returns error message if invalid."""
        if not _matches_type(value, self.type):
            return f"Parameter '{self.name}' must be of type {self.type}"

        if self.enum is not None and value not in self.enum:
            choices = ", ".join(str(e) for e in self.enum)
            return f"Parameter '{self.name}' must be one of: {choices}"

        if self.minimum is not None and value < self.minimum:
            return f"Parameter '{self.name}' must be >= {self.minimum}"
        if self.maximum is not None and value > self.maximum:
            return f"Parameter '{self.name}' must be <= {self.maximum}"

        if self.min_length is not None and len(value) < self.min_length:
            return f"Parameter '{self.name}' must have length >= {self.min_length}"

        if self.items is not None:
            for item in value:
                if not _matches_type(item, self.items):
                    return f"Items of '{self.name}' must be of type {self.items}"
        return None


def _matches_type(value: Any, type_name: str) -> bool:
    expected = JSON_TYPES.get(type_name)
    if expected is None:
        return True
    # bool is an int subclass but never a JSON number
    if isinstance(value, bool) and type_name != "boolean":
        return False
    if type_name == "integer" and isinstance(value, float):
        return value.is_integer()
    return isinstance(value, expected)


@dataclass
class Tool:
    """Tool definition for MCP."""
    name: str
    description: str
    parameters: List[ToolParameter] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to MCP tool definition format."""
        properties = {}
        required = []

        for param in self.parameters:
            properties[param.name] = param.to_json_schema()
            if param.required:
                required.append(param.name)

        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        }


@dataclass
class ToolResult:
    """Result from tool execution."""
    success: bool
    content: Any
    content_type: str = "text"
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result = {
            "success": self.success,
            "content": self.content,
            "content_type": self.content_type,
        }
        if self.error:
            result["error"] = self.error
        if self.metadata:
            result["metadata"] = self.metadata
        return result


@dataclass
class Resource:
    """Static resource definition."""
    uri: str
    name: str
    description: str
    mime_type: str = "text/plain"

    def to_dict(self) -> dict:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass
class ResourceTemplate:
    """Resource addressed by a URI template such as help://topic/{topic}."""
    uri_template: str
    name: str
    description: str
    mime_type: str = "text/plain"

    def to_dict(self) -> dict:
        return {
            "uriTemplate": self.uri_template,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }

    def match(self, uri: str) -> Optional[Dict[str, str]]:
        """Return the template variables if the URI matches, else None."""
        pattern = ""
        for part in re.split(r"(\{\w+\})", self.uri_template):
            if part.startswith("{") and part.endswith("}"):
                pattern += f"(?P<{part[1:-1]}>[^/]+)"
            else:
                pattern += re.escape(part)
        m = re.fullmatch(pattern, uri)
        return m.groupdict() if m else None


@dataclass
class ResourceContent:
    """Contents returned by resources/read."""
    uri: str
    mime_type: str
    text: str

    def to_dict(self) -> dict:
        return {"uri": self.uri, "mimeType": self.mime_type, "text": self.text}


@dataclass
class PromptArgument:
    """Prompt argument definition."""
    name: str
    description: str
    required: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }


@dataclass
class Prompt:
    """Prompt template definition."""
    name: str
    description: str
    arguments: List[PromptArgument] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [a.to_dict() for a in self.arguments],
        }


@dataclass
class PromptMessage:
    """A single message of a rendered prompt."""
    role: str
    text: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": {"type": "text", "text": self.text}}


def to_snake_case(name: str) -> str:
    """Map a camelCase wire name (maxDepth) to a keyword argument (max_depth)."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def parse_message(data: Union[str, dict]) -> MCPMessage:
    """Parse a raw message into an MCP message object."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")

    if "method" in data:
        return MCPRequest.from_dict(data)
    elif "result" in data or "error" in data:
        return MCPResponse.from_dict(data)
    else:
        return MCPMessage.from_dict(data)
