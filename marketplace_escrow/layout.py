from typing import Dict, Iterable, Iterator, NamedTuple, Tuple, Type

from .codec import Primitive


class Field(NamedTuple):
    name: str
    codec: Primitive
    # >1 declares a fixed-capacity array: ``count`` back-to-back elements, no length prefix.
    count: int = 1

    @property
    def width(self) -> int:
        return self.codec.width * self.count


class Layout:
    """Ordered fixed-offset description of one account record version."""

    def __init__(self, name: str, fields: Iterable[Field], state_cls: Type):
        self.name = name
        self.fields: Tuple[Field, ...] = tuple(fields)
        self.state_cls = state_cls
        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"{name}: duplicate field names")
        if any(f.count < 1 for f in self.fields):
            raise ValueError(f"{name}: field counts must be positive")
        self.size = sum(f.width for f in self.fields)

    def __repr__(self) -> str:
        return f"Layout({self.name}, size={self.size})"

    def placed(self) -> Iterator[Tuple[int, Field]]:
        offset = 0
        for field in self.fields:
            yield offset, field
            offset += field.width

    def offsets(self) -> Dict[str, int]:
        return {field.name: offset for offset, field in self.placed()}
