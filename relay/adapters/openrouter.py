import httpx
from typing import Optional, Dict, Any
from relay.adapters.base import BaseModelAdapter


def extract_content(data: Any) -> Optional[str]:
    """Returns choices[0].message.content, or None if the shape doesn't match."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def extract_error_message(response: httpx.Response) -> Optional[str]:
    """Structured upstream error, e.g. {"error": {"message": "..."}}."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return None


class OpenRouterAdapter(BaseModelAdapter):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def generate(self, model_id: str, message: str) -> Dict[str, Any]:
        """
        Calls OpenRouter chat completions. Raises httpx errors on transport
        failure or non-2xx status.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": model_id,
            "messages": [{"role": "user", "content": message}],
        }

        async with httpx.AsyncClient(transport=self.transport) as client:
            resp = await client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()

            try:
                data = resp.json()
            except ValueError:
                data = None

            return {
                "response": extract_content(data),
                "model": model_id,
                "provider": "openrouter",
            }
