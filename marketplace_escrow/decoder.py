import logging
from typing import Any, Dict, Sequence

from .codec import Buffer
from .errors import LengthMismatch, OutOfRange
from .layout import Layout

logger = logging.getLogger(__name__)


def decode_fields(layout: Layout, buffer: Buffer) -> Dict[str, Any]:
    if len(buffer) != layout.size:
        raise LengthMismatch(layout.name, layout.size, len(buffer))
    values: Dict[str, Any] = {}
    for offset, field in layout.placed():
        if field.count == 1:
            values[field.name] = field.codec.read(buffer, offset)
        else:
            step = field.codec.width
            values[field.name] = tuple(
                field.codec.read(buffer, offset + i * step) for i in range(field.count)
            )
    return values


def decode(layout: Layout, buffer: Buffer):
    """Decode ``buffer`` into ``layout.state_cls``. Nothing is returned on failure."""
    state = layout.state_cls(**decode_fields(layout, buffer))
    logger.debug("escrow_decoded layout=%s size=%s", layout.name, layout.size)
    return state


def encode(layout: Layout, state) -> bytes:
    if isinstance(state, dict):
        values = state
    else:
        values = {field.name: getattr(state, field.name) for field in layout.fields}
    out = bytearray(layout.size)
    for offset, field in layout.placed():
        value = values[field.name]
        if field.count == 1:
            field.codec.write(out, offset, value)
            continue
        items: Sequence[Any] = value
        if len(items) != field.count:
            raise OutOfRange(f"{layout.name}.{field.name}: expected {field.count} items, got {len(items)}")
        step = field.codec.width
        for i, item in enumerate(items):
            field.codec.write(out, offset + i * step, item)
    return bytes(out)
