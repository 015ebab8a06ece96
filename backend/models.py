"""Quote record and batch (de)serialization."""

from datetime import datetime
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, TypeAdapter


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    attribution: str
    created_at: datetime


_batch_adapter = TypeAdapter(list[Quote])


def encode_batch(batch: list[Quote]) -> bytes:
    """Serialize a batch as a JSON array of quote objects."""
    return _batch_adapter.dump_json(batch)


def decode_batch(payload: bytes | str) -> list[Quote]:
    """Parse a JSON array of quotes. Raises pydantic.ValidationError on bad input."""
    return _batch_adapter.validate_json(payload)


class Connectivity(NamedTuple):
    """Result of a synchronous backend reachability check."""

    store: bool
    cache: bool

    @property
    def ready(self) -> bool:
        # Cache reachability is advisory; the store is the source of truth.
        return self.store
