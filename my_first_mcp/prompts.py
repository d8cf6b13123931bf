"""
MCP Prompts.

Prompt templates the client can fill in:
- code-review: ask for a review of a code snippet
- explain-code: ask for an explanation at a chosen level
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .protocol import Prompt, PromptArgument, PromptMessage, to_snake_case


EXPLANATION_LEVELS = {
    "beginner": "in simple terms a programming beginner can follow",
    "intermediate": "for someone with basic programming knowledge",
    "advanced": "in depth for an experienced developer",
}


class PromptArgumentError(ValueError):
    """Prompt arguments are missing or invalid."""


def generate_code_review_prompt(
    code: str,
    language: Optional[str] = None,
    focus_areas: Optional[str] = None,
) -> List[PromptMessage]:
    lang = language or "unknown language"
    focus = focus_areas or "overall code quality"

    text = f"""Please review the following {lang} code.

## Focus areas
{focus}

## Code
```{language or ""}
{code}
```

## What to include
1. A code quality score (1-10)
2. Parts that need improvement
3. Parts that are well written
4. Concrete suggestions for improvement
"""
    return [PromptMessage(role="user", text=text)]


def generate_explain_code_prompt(code: str, level: str = "intermediate") -> List[PromptMessage]:
    if level not in EXPLANATION_LEVELS:
        raise PromptArgumentError(
            f"Invalid level: {level}. Expected one of: {', '.join(EXPLANATION_LEVELS)}"
        )

    text = f"""Please explain the following code {EXPLANATION_LEVELS[level]}.

```
{code}
```

## Explanation format
1. Purpose of the code
2. Step-by-step walkthrough of the main logic
3. Patterns or techniques used
4. Pitfalls to watch out for
"""
    return [PromptMessage(role="user", text=text)]


Generator = Callable[..., List[PromptMessage]]


@dataclass
class PromptRegistry:
    """Registry of prompt templates and their generators."""
    prompts: Dict[str, Tuple[Prompt, Generator]] = field(default_factory=dict)

    def register(self, prompt: Prompt, generator: Generator) -> None:
        self.prompts[prompt.name] = (prompt, generator)

    def get(self, name: str) -> Optional[Prompt]:
        entry = self.prompts.get(name)
        return entry[0] if entry else None

    def names(self) -> List[str]:
        return list(self.prompts)

    def list_prompts(self) -> List[Prompt]:
        return [prompt for prompt, _ in self.prompts.values()]

    def render(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> List[PromptMessage]:
        """
        Fill in a prompt template.

        Raises:
            KeyError: Unknown prompt name
            PromptArgumentError: Missing required or unknown argument
        """
        prompt, generator = self.prompts[name]
        arguments = arguments or {}

        declared = {arg.name for arg in prompt.arguments}
        for key in arguments:
            if key not in declared:
                raise PromptArgumentError(f"Unknown argument: {key}")
        for arg in prompt.arguments:
            if arg.required and not arguments.get(arg.name):
                raise PromptArgumentError(f"Missing required argument: {arg.name}")

        kwargs = {}
        for arg in prompt.arguments:
            value = arguments.get(arg.name)
            if value is not None:
                kwargs[to_snake_case(arg.name)] = str(value)
        return generator(**kwargs)


def create_default_prompts() -> PromptRegistry:
    registry = PromptRegistry()
    registry.register(
        Prompt(
            name="code-review",
            description="Request a code review",
            arguments=[
                PromptArgument("code", "Code to review", required=True),
                PromptArgument("language", "Programming language"),
                PromptArgument("focusAreas", "Areas to focus the review on"),
            ],
        ),
        generate_code_review_prompt,
    )
    registry.register(
        Prompt(
            name="explain-code",
            description="Request an explanation of a piece of code",
            arguments=[
                PromptArgument("code", "Code to explain", required=True),
                PromptArgument("level", "Explanation level: beginner, intermediate or advanced"),
            ],
        ),
        generate_explain_code_prompt,
    )
    return registry
