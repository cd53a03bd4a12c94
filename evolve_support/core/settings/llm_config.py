"""Chat model provider configuration for the support assistant."""

from typing import Literal

from pydantic import BaseModel, SecretStr


class LLMConfig(BaseModel, frozen=True):
    """Credentials for both providers plus the completion parameters.

    Replies are short support answers, hence the 500 token ceiling.
    """

    provider: Literal["openai", "anthropic"]
    openai_api_key: SecretStr
    openai_model: str
    anthropic_api_key: SecretStr
    anthropic_model: str
    max_tokens: int = 500
    temperature: float = 0.7

    @property
    def model(self) -> str:
        """Model name of the selected provider."""
        if self.provider == "anthropic":
            return self.anthropic_model
        return self.openai_model
