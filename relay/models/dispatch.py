from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple


class ModelRegistry:
    """Read-only mapping of model key → upstream model id."""

    def __init__(self, models: Mapping[str, str]):
        self._models = MappingProxyType(dict(models))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def resolve(self, key: str) -> str:
        return self._models[key]

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._models)


@dataclass(frozen=True)
class FallbackOrder:
    keys: Tuple[str, ...]

    @classmethod
    def build(cls, keys: Iterable[str], registry: ModelRegistry) -> "FallbackOrder":
        keys = tuple(keys)
        missing = [k for k in keys if k not in registry]
        if missing:
            raise ValueError(f"Fallback keys not in registry: {', '.join(missing)}")
        return cls(keys=keys)

    def candidates(self, requested: str) -> Iterator[str]:
        """Fallback keys in order, without the requested key or duplicates."""
        seen = {requested}
        for key in self.keys:
            if key in seen:
                continue
            seen.add(key)
            yield key


@dataclass(frozen=True)
class ChatRequest:
    message: str
    model_key: str


@dataclass(frozen=True)
class AttemptResult:
    model_key: str
    success: bool
    reply: Optional[str] = None
    error: Optional[str] = None
    status: Optional[int] = None
    latency_ms: float = 0.0

    @classmethod
    def ok(cls, model_key: str, reply: str, latency_ms: float = 0.0) -> "AttemptResult":
        return cls(model_key=model_key, success=True, reply=reply, latency_ms=latency_ms)

    @classmethod
    def failed(
        cls,
        model_key: str,
        error: str,
        status: Optional[int] = None,
        latency_ms: float = 0.0,
    ) -> "AttemptResult":
        return cls(model_key=model_key, success=False, error=error, status=status, latency_ms=latency_ms)


@dataclass(frozen=True)
class DispatchResult:
    """Successful dispatch: the reply and the key that served it."""
    reply: str
    served_by: str
    attempts: Tuple[AttemptResult, ...]

    @property
    def fallback_used(self) -> bool:
        return len(self.attempts) > 1
