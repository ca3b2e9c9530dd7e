from typing import Any

from relay.errors import InvalidInput, MessageTooLong, UnknownModel
from relay.models.dispatch import ChatRequest, ModelRegistry

MAX_MESSAGE_LENGTH = 10000


def validate_chat_request(
    message: Any,
    model: Any,
    registry: ModelRegistry,
    max_length: int = MAX_MESSAGE_LENGTH,
) -> ChatRequest:
    """
    Checks raw caller input against the registry. The message is passed
    through untouched; stripping is only used to detect blank input.
    Length is counted in characters.
    """
    if not isinstance(message, str) or not message.strip():
        raise InvalidInput()
    if len(message) > max_length:
        raise MessageTooLong()
    if not isinstance(model, str) or model not in registry:
        raise UnknownModel()
    return ChatRequest(message=message, model_key=model)
