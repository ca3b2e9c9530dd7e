from abc import ABC, abstractmethod
from typing import Dict, Any


class BaseModelAdapter(ABC):
    """
    Abstract base class for upstream LLM providers.
    Enforces a common interface for single-message generation.
    """

    @abstractmethod
    async def generate(self, model_id: str, message: str) -> Dict[str, Any]:
        """
        Sends one user message to the provider.

        Args:
            model_id: Fully-qualified upstream model identifier
            message: User input

        Returns:
            Dict containing:
                - response: Optional[str] (None when the reply shape is unexpected)
                - model: str
                - provider: str

        Raises:
            Any transport, status or timeout error from the provider.
        """
        pass
