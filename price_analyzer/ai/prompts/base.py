"""Base prompt class."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class PromptConfig:
    """Generation parameters sent with a prompt."""

    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None


class Prompt:
    """Base class for all prompts."""

    def __init__(self, template: str, system_prompt: Optional[str] = None, config: Optional[PromptConfig] = None):
        """Initialize the prompt.

        Args:
            template: The prompt template string
            system_prompt: The system prompt, omitted from messages when None
            config: Generation parameters
        """
        self.template = template
        self.system_prompt = system_prompt
        self.config = config or PromptConfig()

    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with variables.

        Args:
            **kwargs: Variables to format the template with

        Returns:
            str: The formatted prompt
        """
        return self.template.format(**kwargs)

    def to_messages(self, **kwargs: Any) -> List[Dict[str, str]]:
        """Convert the template to a list of messages.

        Args:
            **kwargs: Variables to format the template with

        Returns:
            List[Dict[str, str]]: List of message dictionaries
        """
        formatted_user_message = self.format(**kwargs)
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": formatted_user_message})
        return messages
