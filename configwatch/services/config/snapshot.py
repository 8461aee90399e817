"""
Configuration Snapshot

Immutable value types for one fetched AI configuration:
- ParamValue - tagged model parameter (number, string, boolean)
- Message - prompt template message (role + content)
- ConfigSnapshot - model name, parameters and messages
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from configwatch.common.exceptions import ConfigError, ParameterTypeError


class ParamKind(str, Enum):
    """Supported parameter value kinds"""
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ParamValue:
    """Model parameter value with an explicit kind"""
    kind: ParamKind
    value: int | float | str | bool
    name: str | None = field(default=None, compare=False)

    @classmethod
    def of(cls, raw: Any, name: str | None = None) -> "ParamValue":
        """
        Wrap a raw JSON value.

        Raises:
            ParameterTypeError: If the value is not a number, string or boolean
        """
        # bool is a subclass of int, so it must be checked first
        if isinstance(raw, bool):
            return cls(ParamKind.BOOLEAN, raw, name)
        if isinstance(raw, (int, float)):
            return cls(ParamKind.NUMBER, raw, name)
        if isinstance(raw, str):
            return cls(ParamKind.STRING, raw, name)
        raise ParameterTypeError(name, "number, string or boolean", type(raw).__name__)

    def _require(self, kind: ParamKind) -> None:
        if self.kind is not kind:
            raise ParameterTypeError(self.name, kind.value, self.kind.value)

    def as_float(self) -> float:
        self._require(ParamKind.NUMBER)
        return float(self.value)

    def as_int(self) -> int:
        """Numeric value truncated to int"""
        self._require(ParamKind.NUMBER)
        return int(self.value)

    def as_str(self) -> str:
        self._require(ParamKind.STRING)
        return str(self.value)

    def as_bool(self) -> bool:
        self._require(ParamKind.BOOLEAN)
        return bool(self.value)


@dataclass(frozen=True)
class Message:
    """Prompt template message"""
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ConfigSnapshot:
    """
    One complete AI configuration at a point in time.

    Never mutated after construction: parameters are exposed through a
    read-only mapping and messages as a tuple. Compared by value, but not
    hashable, since the parameter mapping is not.
    """
    __hash__ = None  # type: ignore[assignment]

    model_name: str
    parameters: Mapping[str, ParamValue] = field(default_factory=dict)
    messages: tuple[Message, ...] = ()
    enabled: bool = True
    variation_key: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        object.__setattr__(self, "messages", tuple(self.messages))

    @classmethod
    def create(
        cls,
        model_name: str,
        parameters: Mapping[str, Any] | None = None,
        messages: list[Message | Mapping[str, str]] | None = None,
        enabled: bool = True,
        variation_key: str | None = None,
    ) -> "ConfigSnapshot":
        """Build a snapshot from raw Python values"""
        params = {
            key: value if isinstance(value, ParamValue) else ParamValue.of(value, key)
            for key, value in (parameters or {}).items()
        }
        msgs = [
            m if isinstance(m, Message) else Message(role=m["role"], content=m["content"])
            for m in (messages or [])
        ]
        return cls(
            model_name=model_name,
            parameters=params,
            messages=tuple(msgs),
            enabled=enabled,
            variation_key=variation_key,
        )

    def param(self, name: str) -> ParamValue | None:
        """Get a model parameter by name"""
        return self.parameters.get(name)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready encoding of the whole snapshot"""
        return {
            "model_name": self.model_name,
            "parameters": {key: p.value for key, p in self.parameters.items()},
            "messages": [m.to_dict() for m in self.messages],
            "enabled": self.enabled,
            "variation_key": self.variation_key,
        }


DEFAULT_MODEL_NAME = "default-model"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

DEFAULT_SNAPSHOT = ConfigSnapshot.create(
    model_name=DEFAULT_MODEL_NAME,
    parameters={
        "temperature": DEFAULT_TEMPERATURE,
        "maxTokens": DEFAULT_MAX_TOKENS,
    },
)


def parse_snapshot(payload: Any) -> ConfigSnapshot:
    """
    Decode an AI config flag value into a snapshot.

    Expected shape:
        {
            "model": {"name": "...", "parameters": {...}, "custom": {...}},
            "messages": [{"role": "system", "content": "..."}],
            "_ldMeta": {"enabled": true, "variationKey": "..."}
        }

    Custom model parameters are merged under the standard ones.

    Raises:
        ConfigError: If the payload is malformed
    """
    if not isinstance(payload, dict):
        raise ConfigError(f"AI config must be an object, got {type(payload).__name__}")

    model = payload.get("model") or {}
    if not isinstance(model, dict):
        raise ConfigError("'model' must be an object")

    model_name = model.get("name") or ""
    if not isinstance(model_name, str):
        raise ConfigError("'model.name' must be a string")

    raw_params: dict[str, Any] = {}
    for section in ("custom", "parameters"):
        values = model.get(section) or {}
        if not isinstance(values, dict):
            raise ConfigError(f"'model.{section}' must be an object")
        raw_params.update(values)

    raw_messages = payload.get("messages") or []
    if not isinstance(raw_messages, list):
        raise ConfigError("'messages' must be a list")

    messages = []
    for index, m in enumerate(raw_messages):
        if not isinstance(m, dict):
            raise ConfigError(f"message {index} must be an object")
        role, content = m.get("role"), m.get("content")
        if not isinstance(role, str) or not isinstance(content, str):
            raise ConfigError(f"message {index} needs string 'role' and 'content'")
        messages.append(Message(role=role, content=content))

    meta = payload.get("_ldMeta") or {}
    if not isinstance(meta, dict):
        raise ConfigError("'_ldMeta' must be an object")

    enabled = meta.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigError("'_ldMeta.enabled' must be a boolean")

    variation_key = meta.get("variationKey")
    if variation_key is not None and not isinstance(variation_key, str):
        raise ConfigError("'_ldMeta.variationKey' must be a string")

    try:
        return ConfigSnapshot.create(
            model_name=model_name,
            parameters=raw_params,
            messages=messages,
            enabled=enabled,
            variation_key=variation_key,
        )
    except ParameterTypeError as e:
        raise ConfigError(e.message) from e
