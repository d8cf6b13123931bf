"""
MCP Server implementation.

Main server that handles the MCP protocol, tool execution, resources,
prompts and lifecycle management.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from .advanced import TTLCache
from .basics import DEFAULT_TIMEZONE, SERVER_NAME, SERVER_VERSION, get_server_info
from .prompts import PromptArgumentError, PromptRegistry, create_default_prompts
from .protocol import (
    PROTOCOL_VERSION,
    MCPErrorCode,
    MCPError,
    MCPProtocolError,
    MCPRequest,
    MCPResponse,
    Resource,
    ResourceTemplate,
    parse_message,
)
from .resources import (
    ResourceRegistry,
    get_config_resource,
    get_help_topic,
    get_server_info_resource,
)
from .tools import (
    AnalyzeDependenciesTool,
    AnalyzeStructureTool,
    BaseTool,
    CalculateTool,
    CountLinesTool,
    CurrentTimeTool,
    RandomNumberTool,
    ReverseStringTool,
    ServerInfoTool,
    ServerStatusTool,
    ToolRegistry,
)
from .transport import Transport, StdioTransport


logger = logging.getLogger(__name__)


LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def parse_log_level(value: Optional[str], default: int = logging.INFO) -> int:
    """Map a LOG_LEVEL name to a logging level; unknown names give the default."""
    if not value:
        return default
    return LOG_LEVELS.get(value.strip().upper(), default)


@dataclass
class ServerConfig:
    """Configuration for MCP server."""
    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    root: Optional[str] = None
    default_timezone: str = DEFAULT_TIMEZONE
    cache_ttl: float = 300.0
    max_entries: Optional[int] = 100_000
    enable_basic_tools: bool = True
    enable_analysis_tools: bool = True
    enable_status_tools: bool = True
    max_concurrent_requests: int = 10
    request_timeout: float = 60.0
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ServerConfig":
        """Build a config from LOG_LEVEL, MCP_ROOT and MCP_TIMEZONE."""
        environ = os.environ if environ is None else environ
        values = {
            "log_level": parse_log_level(environ.get("LOG_LEVEL")),
            "root": environ.get("MCP_ROOT") or None,
            "default_timezone": environ.get("MCP_TIMEZONE") or DEFAULT_TIMEZONE,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "root": self.root,
            "timezone": self.default_timezone,
            "logLevel": logging.getLevelName(self.log_level),
            "features": {
                "basicTools": self.enable_basic_tools,
                "analysisTools": self.enable_analysis_tools,
                "statusTools": self.enable_status_tools,
            },
            "limits": {
                "maxRandomCount": RandomNumberTool.max_count,
                "maxStructureDepth": 10,
                "maxEntries": self.max_entries,
                "cacheTtlSeconds": self.cache_ttl,
                "requestTimeoutSeconds": self.request_timeout,
            },
        }


class MCPServer:
    """
    MCP Server that handles tool, resource and prompt registration,
    request processing, and lifecycle.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        registry: Optional[ToolRegistry] = None,
        resources: Optional[ResourceRegistry] = None,
        prompts: Optional[PromptRegistry] = None,
    ):
        self.config = config or ServerConfig()
        self.registry = registry or ToolRegistry()
        self.resources = resources or ResourceRegistry(cache=TTLCache(self.config.cache_ttl))
        self.prompts = prompts or PromptRegistry()
        self._transport: Optional[Transport] = None
        self._running = False
        self._handlers: Dict[str, Callable] = {}
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)

        # Register default handlers
        self._register_default_handlers()

    def _register_default_handlers(self) -> None:
        """Register built-in MCP method handlers."""
        self._handlers["initialize"] = self._handle_initialize
        self._handlers["initialized"] = self._handle_initialized
        self._handlers["notifications/initialized"] = self._handle_initialized
        self._handlers["tools/list"] = self._handle_list_tools
        self._handlers["tools/call"] = self._handle_call_tool
        self._handlers["resources/list"] = self._handle_list_resources
        self._handlers["resources/templates/list"] = self._handle_list_resource_templates
        self._handlers["resources/read"] = self._handle_read_resource
        self._handlers["prompts/list"] = self._handle_list_prompts
        self._handlers["prompts/get"] = self._handle_get_prompt
        self._handlers["shutdown"] = self._handle_shutdown
        self._handlers["ping"] = self._handle_ping

    def register_tool(self, tool: BaseTool) -> None:
        """Register a tool with the server."""
        self.registry.register(tool)

    def register_handler(self, method: str, handler: Callable) -> None:
        """Register a custom method handler."""
        self._handlers[method] = handler

    async def _handle_initialize(self, params: Optional[dict]) -> dict:
        """Handle initialize request."""
        client = (params or {}).get("clientInfo", {})
        logger.info("Initialize from %s", client.get("name", "unknown client"))
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
                "prompts": {"listChanged": False},
            },
            "serverInfo": {
                "name": self.config.name,
                "version": self.config.version,
            },
        }

    async def _handle_initialized(self, params: Optional[dict]) -> dict:
        """Handle initialized notification."""
        logger.info("Client initialized")
        return {}

    async def _handle_list_tools(self, params: Optional[dict]) -> dict:
        """Handle tools/list request."""
        tools = self.registry.list_tools()
        return {
            "tools": [t.to_dict() for t in tools],
        }

    async def _handle_call_tool(self, params: Optional[dict]) -> dict:
        """Handle tools/call request."""
        if not params:
            return _error_content("Missing parameters")

        name = params.get("name")
        arguments = params.get("arguments") or {}

        if not name:
            return _error_content("Missing tool name")

        # Tools touch the filesystem; keep the event loop free
        result = await asyncio.to_thread(self.registry.execute, name, arguments)

        if not result.success:
            logger.info("Tool %s failed: %s", name, result.error)
            return _error_content(result.error)

        # Format content based on type
        if result.content_type == "json":
            content_text = json.dumps(result.content, indent=2)
        else:
            content_text = str(result.content)

        return {
            "content": [
                {"type": "text", "text": content_text}
            ],
        }

    async def _handle_list_resources(self, params: Optional[dict]) -> dict:
        return {"resources": [r.to_dict() for r in self.resources.list_resources()]}

    async def _handle_list_resource_templates(self, params: Optional[dict]) -> dict:
        return {"resourceTemplates": [t.to_dict() for t in self.resources.list_templates()]}

    async def _handle_read_resource(self, params: Optional[dict]) -> dict:
        uri = (params or {}).get("uri")
        if not uri:
            raise MCPProtocolError(MCPErrorCode.INVALID_PARAMS, "Missing resource uri")

        content = self.resources.read(uri)
        if content is None:
            raise MCPProtocolError(
                MCPErrorCode.RESOURCE_NOT_FOUND,
                f"Resource not found: {uri}",
                {"uri": uri},
            )
        return {"contents": [content.to_dict()]}

    async def _handle_list_prompts(self, params: Optional[dict]) -> dict:
        return {"prompts": [p.to_dict() for p in self.prompts.list_prompts()]}

    async def _handle_get_prompt(self, params: Optional[dict]) -> dict:
        params = params or {}
        name = params.get("name")
        prompt = self.prompts.get(name) if name else None
        if prompt is None:
            raise MCPProtocolError(MCPErrorCode.PROMPT_NOT_FOUND, f"Prompt not found: {name}")

        try:
            messages = self.prompts.render(name, params.get("arguments"))
        except PromptArgumentError as e:
            raise MCPProtocolError(MCPErrorCode.INVALID_PARAMS, str(e))

        return {
            "description": prompt.description,
            "messages": [m.to_dict() for m in messages],
        }

    async def _handle_shutdown(self, params: Optional[dict]) -> dict:
        """Handle shutdown request."""
        logger.info("Shutdown requested")
        self._running = False
        return {}

    async def _handle_ping(self, params: Optional[dict]) -> dict:
        """Handle ping request."""
        return {}

    async def process_request(self, request: MCPRequest) -> MCPResponse:
        """Process a single MCP request."""
        handler = self._handlers.get(request.method)

        if handler is None:
            error = MCPError.from_code(
                MCPErrorCode.METHOD_NOT_FOUND,
                f"Unknown method: {request.method}",
            )
            return MCPResponse.failure(request.id, error)

        try:
            async with self._semaphore:
                result = await asyncio.wait_for(
                    handler(request.params),
                    timeout=self.config.request_timeout,
                )
                return MCPResponse.success(request.id, result)
        except MCPProtocolError as e:
            return MCPResponse.failure(request.id, e.error)
        except asyncio.TimeoutError:
            error = MCPError.from_code(
                MCPErrorCode.TIMEOUT,
                f"Request timed out after {self.config.request_timeout}s",
            )
            return MCPResponse.failure(request.id, error)
        except Exception as e:
            logger.exception(f"Error processing request: {e}")
            error = MCPError.from_code(
                MCPErrorCode.INTERNAL_ERROR,
                str(e),
            )
            return MCPResponse.failure(request.id, error)

    async def handle_message(self, data: dict) -> Optional[dict]:
        """Handle an incoming message. Notifications produce no response."""
        try:
            message = parse_message(data)
        except ValueError as e:
            error = MCPError.from_code(MCPErrorCode.INVALID_REQUEST, str(e))
            return MCPResponse.failure(None, error).to_dict()

        try:
            if isinstance(message, MCPRequest):
                response = await self.process_request(message)
                if message.is_notification:
                    if response.error is not None:
                        logger.debug("Notification %s: %s", message.method, response.error.message)
                    return None
                return response.to_dict()

            return None
        except Exception as e:
            logger.exception(f"Error handling message: {e}")
            error = MCPError.from_code(
                MCPErrorCode.INTERNAL_ERROR,
                str(e),
            )
            msg_id = data.get("id") if isinstance(data, dict) else None
            return MCPResponse.failure(msg_id, error).to_dict()

    async def run(self, transport: Optional[Transport] = None) -> None:
        """Run the server main loop."""
        self._transport = transport or StdioTransport()
        self._running = True

        logger.info(f"MCP Server {self.config.name} v{self.config.version} starting")

        try:
            async with self._transport:
                while self._running:
                    try:
                        message = await self._transport.receive()

                        if message is None:
                            logger.info("EOF received, shutting down")
                            break

                        response = await self.handle_message(message)

                        if response is not None:
                            await self._transport.send(response)
                    except ValueError as e:
                        logger.error(f"Parse error: {e}")
                        error_response = MCPResponse.failure(
                            None,
                            MCPError.from_code(MCPErrorCode.PARSE_ERROR, str(e)),
                        )
                        await self._transport.send(error_response.to_dict())
                    except Exception as e:
                        logger.exception(f"Error in main loop: {e}")
        finally:
            self._running = False
            logger.info("Server stopped")

    def stop(self) -> None:
        """Signal the server to stop."""
        self._running = False


def _error_content(message: str) -> dict:
    return {
        "content": [{"type": "text", "text": f"Error: {message}"}],
        "isError": True,
    }


def create_server(
    config: Optional[ServerConfig] = None,
    tools: Optional[List[BaseTool]] = None,
) -> MCPServer:
    """
    Create an MCP server with configuration, tools, resources and prompts.

    Args:
        config: Server configuration
        tools: Additional tools to register

    Returns:
        Configured MCPServer instance
    """
    config = config or ServerConfig()
    server = MCPServer(config, prompts=create_default_prompts())

    # Register default tools based on config
    if config.enable_basic_tools:
        server.register_tool(CurrentTimeTool(default_timezone=config.default_timezone))
        server.register_tool(CalculateTool())
        server.register_tool(RandomNumberTool())
        server.register_tool(ReverseStringTool())
        server.register_tool(ServerInfoTool(server.registry.names))

    if config.enable_status_tools:
        server.register_tool(ServerStatusTool())

    if config.enable_analysis_tools:
        server.register_tool(AnalyzeStructureTool(root=config.root, max_entries=config.max_entries))
        server.register_tool(AnalyzeDependenciesTool(root=config.root))
        server.register_tool(CountLinesTool(root=config.root, max_entries=config.max_entries))

    # Register custom tools
    if tools:
        for tool in tools:
            server.register_tool(tool)

    _register_default_resources(server)
    return server


def _register_default_resources(server: MCPServer) -> None:
    resources = server.resources
    resources.register(
        Resource(
            uri="server://info",
            name="Server info",
            description="Server name, version and capabilities",
            mime_type="application/json",
        ),
        lambda: get_server_info_resource(
            get_server_info(server.registry.names()),
            resources.uris(),
            server.prompts.names(),
        ),
    )
    resources.register(
        Resource(
            uri="config://settings",
            name="Server settings",
            description="Effective server configuration",
            mime_type="application/json",
        ),
        lambda: get_config_resource(server.config.to_dict()),
    )
    resources.register_template(
        ResourceTemplate(
            uri_template="help://topic/{topic}",
            name="Help",
            description="Help pages: tools, resources, prompts",
        ),
        get_help_topic,
    )
