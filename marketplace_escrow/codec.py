"""
Fixed-width primitive codecs for on-chain account records.

Every codec reads or writes exactly ``width`` bytes at an explicit offset,
little-endian. There is no length prefix anywhere in this module; escrow
records are flat structs of fixed-size fields.
"""

from typing import Any, Union

import borsh_construct as borsh
from construct import Adapter, Bytes, Construct
from solders.pubkey import Pubkey

from .errors import OutOfRange

PUBKEY_LENGTH = 32
# SOL-denominated escrows carry the all-zero key in their currency field.
NATIVE_MINT = Pubkey.default()

Buffer = Union[bytes, bytearray, memoryview]


class PubkeyAdapter(Adapter):
    """Maps 32 raw bytes to/from a ``solders`` Pubkey."""

    def __init__(self):
        super().__init__(Bytes(PUBKEY_LENGTH))

    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        return bytes(obj)


class Primitive:
    def __init__(self, name: str, con: Construct, width: int, unsigned: bool = False):
        self.name = name
        self.con = con
        self.width = width
        self.unsigned = unsigned

    def __repr__(self) -> str:
        return f"Primitive({self.name})"

    def _check_bounds(self, buffer: Buffer, offset: int) -> None:
        if offset < 0 or offset + self.width > len(buffer):
            raise OutOfRange(
                f"{self.name} read of {self.width} bytes at offset {offset} overruns buffer of {len(buffer)}"
            )

    def read(self, buffer: Buffer, offset: int = 0) -> Any:
        self._check_bounds(buffer, offset)
        return self.con.parse(bytes(buffer[offset : offset + self.width]))

    def write(self, buffer: bytearray, offset: int, value: Any) -> None:
        self._check_bounds(buffer, offset)
        if self.unsigned and not 0 <= value < 1 << (8 * self.width):
            raise OutOfRange(f"{value} does not fit in {self.name}")
        if isinstance(value, (bytes, bytearray)) and len(value) != self.width:
            raise OutOfRange(f"{self.name} expects {self.width} bytes, got {len(value)}")
        buffer[offset : offset + self.width] = self.con.build(value)


U8 = Primitive("u8", borsh.U8, 1, unsigned=True)
U16 = Primitive("u16", borsh.U16, 2, unsigned=True)
U32 = Primitive("u32", borsh.U32, 4, unsigned=True)
U64 = Primitive("u64", borsh.U64, 8, unsigned=True)
PUBKEY = Primitive("pubkey", PubkeyAdapter(), PUBKEY_LENGTH)


def raw(width: int) -> Primitive:
    """Opaque fixed-width bytes (discriminators, reserved space)."""
    return Primitive(f"bytes[{width}]", Bytes(width), width)


def decode_u8(buffer: Buffer, offset: int = 0) -> int:
    return U8.read(buffer, offset)


def decode_u16(buffer: Buffer, offset: int = 0) -> int:
    return U16.read(buffer, offset)


def decode_u32(buffer: Buffer, offset: int = 0) -> int:
    return U32.read(buffer, offset)


def decode_u64(buffer: Buffer, offset: int = 0) -> int:
    return U64.read(buffer, offset)


def decode_pubkey(buffer: Buffer, offset: int = 0) -> Pubkey:
    return PUBKEY.read(buffer, offset)


def encode_u8(buffer: bytearray, offset: int, value: int) -> None:
    U8.write(buffer, offset, value)


def encode_u16(buffer: bytearray, offset: int, value: int) -> None:
    U16.write(buffer, offset, value)


def encode_u32(buffer: bytearray, offset: int, value: int) -> None:
    U32.write(buffer, offset, value)


def encode_u64(buffer: bytearray, offset: int, value: int) -> None:
    U64.write(buffer, offset, value)


def encode_pubkey(buffer: bytearray, offset: int, value: Pubkey) -> None:
    PUBKEY.write(buffer, offset, value)


def u64_bytes(value: int) -> bytes:
    out = bytearray(U64.width)
    U64.write(out, 0, value)
    return bytes(out)
