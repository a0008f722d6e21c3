"""
Base resource interface.
"""

import math
from typing import Any, ClassVar, Generic, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from aaraazi.services.client import ApiClient
from aaraazi.services.errors import (
    FailureKind,
    ServiceError,
    UnsupportedOperationError,
)

# Decimal columns arrive as strings from the backend, sometimes as numbers
Amount = str | float | None

T = TypeVar("T", bound=BaseModel)
M = TypeVar("M", bound=BaseModel)


class ApiModel(BaseModel):
    """Backend payloads use camelCase; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def to_decimal(value: Any) -> float:
    """Backend decimals arrive as strings; unparsable values count as zero."""
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def dump_payload(payload: Any) -> Any:
    """Serialise a request payload; models are dumped by alias without nulls."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    return payload


class BaseResource(Generic[T]):
    """
    Thin wrapper translating domain operations into HTTP calls.

    All resources should:
    - Use the shared ApiClient for HTTP requests
    - Return Pydantic models
    - Log failures and re-raise them unchanged
    """

    path: ClassVar[str]
    label: ClassVar[str]  # singular, human readable ("sell cycle")
    model: ClassVar[type[BaseModel]]
    filter_name: ClassVar[str | None] = None
    read_only: ClassVar[bool] = False
    unsupported: ClassVar[frozenset[str]] = frozenset()  # e.g. {"update", "remove"}
    update_method: ClassVar[str] = "PATCH"

    def __init__(self, client: ApiClient):
        self.client = client

    @property
    def service_id(self) -> str:
        return self.path.strip("/")

    @property
    def plural(self) -> str:
        return f"{self.label}s"

    # Reads

    def list_params(self, filter_param: Any) -> dict[str, Any] | None:
        if filter_param is None or self.filter_name is None:
            return None
        return {self.filter_name: filter_param}

    async def find_all(self, filter_param: Any = None) -> Any:
        data = await self._call(
            f"fetch {self.plural}",
            "GET",
            self.path,
            params=self.list_params(filter_param),
        )
        return self.parse_list(data)

    async def find_one(self, id: str) -> T:
        data = await self._call(f"fetch {self.label} {id}", "GET", f"{self.path}/{id}")
        return self.parse(data)

    # Mutations

    async def create(self, payload: Any) -> T:
        self._require("create")
        data = await self._call(
            f"create {self.label}", "POST", self.path, json_data=dump_payload(payload)
        )
        return self.parse(data)

    async def update(self, id: str, payload: Any) -> T:
        self._require("update")
        data = await self._call(
            f"update {self.label} {id}",
            self.update_method,
            f"{self.path}/{id}",
            json_data=dump_payload(payload),
        )
        return self.parse(data)

    async def remove(self, id: str) -> Any:
        self._require("remove")
        return await self._call(
            f"delete {self.label} {id}", "DELETE", f"{self.path}/{id}"
        )

    def _require(self, operation: str) -> None:
        if self.read_only or operation in self.unsupported:
            raise UnsupportedOperationError(self.service_id, operation)

    # Plumbing

    async def _call(self, action: str, method: str, path: str, **kwargs) -> Any:
        try:
            return await self.client.request(
                method, path, service_id=self.service_id, **kwargs
            )
        except ServiceError as e:
            logger.error(f"Failed to {action}: {e}")
            raise

    def parse(self, data: Any, model: type[M] | None = None) -> Any:
        """Validate one record into ``model`` (default: the resource model)."""
        model = model or self.model
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise self._decode_error(e) from e

    def parse_list(self, data: Any, model: type[M] | None = None) -> list[Any]:
        """Validate a list body; anything that is not a list reads as empty."""
        if not isinstance(data, list):
            return []
        adapter = TypeAdapter(list[model or self.model])
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise self._decode_error(e) from e

    def _decode_error(self, error: ValidationError) -> ServiceError:
        logger.error(f"Unexpected {self.label} payload: {error}")
        return ServiceError(
            f"Unexpected {self.label} payload from server",
            service_id=self.service_id,
            kind=FailureKind.DECODE,
        )
