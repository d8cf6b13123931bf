"""
MCP Resources.

Static resources (server://info, config://settings) and the templated help
resource (help://topic/{topic}), served through a ResourceRegistry that
caches reads.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .advanced import TTLCache
from .basics import ServerInfo
from .protocol import Resource, ResourceContent, ResourceTemplate


logger = logging.getLogger(__name__)


HELP_TOPICS = {
    "tools": """## Available tools

1. **get_current_time**: current date and time
   - timezone: IANA timezone (e.g. Asia/Seoul)
   - format: full, date or time
2. **calculate**: arithmetic on two numbers
   - a, b: operands
   - operation: add, subtract, multiply, divide
3. **get_random_number**: random integers
   - min, max: inclusive range
   - count: how many (1-10)
4. **reverse_string**: reverse text
   - text: text to reverse
5. **get_server_info**: server information
6. **get_server_status**: uptime and memory
7. **analyze_structure**: directory tree
   - path, maxDepth (1-10), showHidden
8. **analyze_dependencies**: package.json dependencies and scripts
   - path, includeDevDeps
9. **count_lines**: code / comment / blank line statistics
   - path, extensions""",

    "resources": """## Resources

1. **server://info**: server name, version and capabilities
2. **config://settings**: effective server settings
3. **help://topic/{topic}**: help pages
   - topics: tools, resources, prompts""",

    "prompts": """## Prompt templates

1. **code-review**: ask for a code review
   - code: code to review
   - language: programming language (optional)
   - focusAreas: what to focus on (optional)
2. **explain-code**: ask for an explanation
   - code: code to explain
   - level: beginner, intermediate or advanced""",
}


def json_resource(uri: str, payload: dict) -> ResourceContent:
    return ResourceContent(
        uri=uri,
        mime_type="application/json",
        text=json.dumps(payload, indent=2, ensure_ascii=False),
    )


def get_server_info_resource(
    info: ServerInfo,
    resources: List[str],
    prompts: List[str],
) -> ResourceContent:
    """server://info: identity and capabilities of the running server."""
    return json_resource("server://info", {
        "name": info.name,
        "version": info.version,
        "description": info.description,
        "tools": info.tools,
        "resources": resources,
        "prompts": prompts,
        "capabilities": {
            "tools": bool(info.tools),
            "resources": bool(resources),
            "prompts": bool(prompts),
        },
    })


def get_config_resource(settings: dict) -> ResourceContent:
    """config://settings: the effective server configuration."""
    return json_resource("config://settings", settings)


def get_help_topic(topic: str) -> ResourceContent:
    """Help text for a topic; unknown topics get the list of valid ones."""
    text = HELP_TOPICS.get(topic)
    if text is None:
        text = f"Unknown topic: {topic}. Available topics: {', '.join(HELP_TOPICS)}"
    return ResourceContent(uri=f"help://topic/{topic}", mime_type="text/plain", text=text)


StaticProvider = Callable[[], ResourceContent]
TemplateProvider = Callable[..., ResourceContent]


@dataclass
class ResourceRegistry:
    """Registry of static and templated resources with a read cache."""
    cache: TTLCache = field(default_factory=TTLCache)
    resources: Dict[str, Tuple[Resource, StaticProvider]] = field(default_factory=dict)
    templates: List[Tuple[ResourceTemplate, TemplateProvider]] = field(default_factory=list)

    def register(self, resource: Resource, provider: StaticProvider) -> None:
        self.resources[resource.uri] = (resource, provider)

    def register_template(self, template: ResourceTemplate, provider: TemplateProvider) -> None:
        self.templates.append((template, provider))

    def list_resources(self) -> List[Resource]:
        return [resource for resource, _ in self.resources.values()]

    def list_templates(self) -> List[ResourceTemplate]:
        return [template for template, _ in self.templates]

    def uris(self) -> List[str]:
        return list(self.resources) + [t.uri_template for t, _ in self.templates]

    def read(self, uri: str) -> Optional[ResourceContent]:
        """Read a resource by URI. Returns None if nothing matches."""
        cached = self.cache.get(uri)
        if cached is not None:
            logger.debug("Resource cache hit: %s", uri)
            return cached

        content = self._load(uri)
        if content is not None:
            self.cache.set(uri, content)
        return content

    def _load(self, uri: str) -> Optional[ResourceContent]:
        if uri in self.resources:
            _, provider = self.resources[uri]
            return provider()

        for template, provider in self.templates:
            variables = template.match(uri)
            if variables is not None:
                return provider(**variables)
        return None
