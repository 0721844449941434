from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator, model_validator


class TargetKind(str, Enum):
    TCP = "tcp"
    HTTP = "http"


def split_host_port(address: str) -> tuple[str, int]:
    """
    Split a ``host:port`` address. IPv6 hosts must be bracketed (``[::1]:22``).
    Raises ValueError on anything else.
    """
    host, sep, port_text = address.strip().rpartition(":")
    if not sep or not host or not port_text:
        raise ValueError(f"TCP address must look like host:port, got {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 host must be bracketed, got {address!r}")
    if not host:
        raise ValueError(f"TCP address has an empty host: {address!r}")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"TCP port is not a number: {address!r}") from None
    if not 1 <= port <= 65535:
        raise ValueError(f"TCP port out of range 1-65535: {address!r}")
    return host, port


class FormBody(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    params: dict[str, str]


class JsonBody(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    document: JsonValue = Field(alias="json")


RequestBody = FormBody | JsonBody


class HttpOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    body: RequestBody
    expected_status: int = Field(alias="ok", ge=100, le=599)

    @model_validator(mode="before")
    @classmethod
    def _select_body(cls, data: Any) -> Any:
        # Config form is {params|json, ok}; exactly one body key may be set.
        if not isinstance(data, dict) or "body" in data:
            return data

        data = dict(data)
        params = data.pop("params", None)
        document = data.pop("json", None)
        if (params is None) == (document is None):
            raise ValueError("custom block must set exactly one of 'params' or 'json'")

        if params is not None:
            data["body"] = {"params": params}
        else:
            data["body"] = {"json": document}
        return data


class Target(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    kind: TargetKind
    description: str = Field(alias="desc")
    address: str = Field(alias="addr", min_length=1)
    custom: Optional[HttpOptions] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _check_address(self) -> "Target":
        if self.kind is TargetKind.TCP:
            if self.custom is not None:
                raise ValueError("custom options are only valid for Http targets")
            split_host_port(self.address)
        else:
            parsed = urlparse(self.address)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                raise ValueError(
                    f"Http address must be an absolute http(s) URL, got {self.address!r}"
                )
        return self


class TargetList(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: List[Target] = Field(..., min_length=1)
