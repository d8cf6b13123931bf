"""
my-first-mcp - Tutorial MCP server with basic, project analysis and status tools.

The Model Context Protocol (MCP) enables AI assistants to interact with
external tools and data sources through a standardized interface.
"""

from .protocol import (
    MCPMessage,
    MCPRequest,
    MCPResponse,
    MCPError,
    MCPErrorCode,
    Tool,
    ToolParameter,
    ToolResult,
    Resource,
    ResourceTemplate,
    ResourceContent,
    Prompt,
    PromptArgument,
    PromptMessage,
)
from .analyzer import (
    AnalysisErrorKind,
    analyze_dependencies,
    analyze_structure,
    classify_lines,
    count_lines,
)
from .server import MCPServer, ServerConfig, create_server
from .tools import (
    BaseTool,
    CurrentTimeTool,
    CalculateTool,
    RandomNumberTool,
    ReverseStringTool,
    ServerInfoTool,
    ServerStatusTool,
    AnalyzeStructureTool,
    AnalyzeDependenciesTool,
    CountLinesTool,
    ToolRegistry,
)
from .resources import ResourceRegistry
from .prompts import PromptRegistry
from .transport import (
    Transport,
    StdioTransport,
)

__version__ = "1.0.0"

__all__ = [
    # Protocol
    "MCPMessage",
    "MCPRequest",
    "MCPResponse",
    "MCPError",
    "MCPErrorCode",
    "Tool",
    "ToolParameter",
    "ToolResult",
    "Resource",
    "ResourceTemplate",
    "ResourceContent",
    "Prompt",
    "PromptArgument",
    "PromptMessage",
    # Analysis
    "AnalysisErrorKind",
    "analyze_dependencies",
    "analyze_structure",
    "classify_lines",
    "count_lines",
    # Server
    "MCPServer",
    "ServerConfig",
    "create_server",
    # Tools
    "BaseTool",
    "CurrentTimeTool",
    "CalculateTool",
    "RandomNumberTool",
    "ReverseStringTool",
    "ServerInfoTool",
    "ServerStatusTool",
    "AnalyzeStructureTool",
    "AnalyzeDependenciesTool",
    "CountLinesTool",
    "ToolRegistry",
    # Resources and prompts
    "ResourceRegistry",
    "PromptRegistry",
    # Transport
    "Transport",
    "StdioTransport",
]
