"""EIP-712 style typed data: type encoding, struct hashing and digests."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from Crypto.Hash import keccak

_HEX_BODY = re.compile(r"[0-9a-fA-F]*")
_DECIMAL = re.compile(r"[+-]?[0-9]+")
_HEX_NUMBER = re.compile(r"[+-]?[0-9a-fA-F]+")
_SIZE = re.compile(r"[+-]?[0-9]+")
_U256 = 1 << 256


class TypedDataError(ValueError):
    """Raised when typed data cannot be encoded."""


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 hash of data."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


@dataclass(frozen=True)
class TypeField:
    """One member of a struct type: its name and its type."""

    name: str
    type: str


EIP712_DOMAIN = [TypeField("name", "string"), TypeField("magic", "uint64")]


@dataclass
class TypedDataDomain:
    """The domain part of a typed data message."""

    name: str
    magic: str

    def to_map(self) -> dict[str, Any]:
        return {"name": self.name, "magic": self.magic}


def _mismatch(enc_type: str, enc_value: Any) -> TypedDataError:
    return TypedDataError(f"provided data '{enc_value}' doesn't match type '{enc_type}'")


def _parse_bytes(value: Any) -> bytes | None:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        if value[:2] not in ("0x", "0X"):
            return None
        body = value[2:]
        if len(body) % 2 or _HEX_BODY.fullmatch(body) is None:
            return None
        return bytes.fromhex(body)
    return None


def _parse_big256(text: str) -> int:
    if text == "":
        return 0
    if text[:2] in ("0x", "0X"):
        digits, base, pattern = text[2:], 16, _HEX_NUMBER
    else:
        digits, base, pattern = text, 10, _DECIMAL
    if pattern.fullmatch(digits) is None:
        raise TypedDataError(f"invalid hex or decimal integer {text!r}")
    value = int(digits, base)
    if value.bit_length() > 256:
        raise TypedDataError(f"invalid hex or decimal integer {text!r}")
    return value


def _parse_size(text: str, kind: str) -> int:
    if _SIZE.fullmatch(text) is None:
        raise TypedDataError(f"invalid size on {kind}: {text}")
    return int(text)


def _parse_integer(enc_type: str, enc_value: Any) -> int:
    signed = enc_type.startswith("int")
    if enc_type in ("int", "uint"):
        length = 256
    else:
        prefix = "uint" if enc_type.startswith("uint") else "int"
        length = _parse_size(enc_type[len(prefix):], "integer")

    number: int | None = None
    if isinstance(enc_value, bool):
        number = None
    elif isinstance(enc_value, int):
        number = enc_value
    elif isinstance(enc_value, str):
        number = _parse_big256(enc_value)
    elif isinstance(enc_value, float):
        if enc_value.is_integer() and -(2**63) <= enc_value < 2**63:
            number = int(enc_value)
        else:
            raise TypedDataError(f"invalid float value {enc_value} for type {enc_type}")

    if number is None:
        raise TypedDataError(
            f"invalid integer value {enc_value}/{type(enc_value).__name__} for type {enc_type}"
        )
    if number.bit_length() > length:
        raise TypedDataError(f"integer larger than '{enc_type}'")
    if not signed and number < 0:
        raise TypedDataError(f"invalid negative value for unsigned type {enc_type}")
    return number


def _is_hex_address(value: str) -> bool:
    if value[:2] in ("0x", "0X"):
        value = value[2:]
    return len(value) == 40 and _HEX_BODY.fullmatch(value) is not None


@dataclass
class TypedData:
    """A typed data message with its type definitions and domain."""

    types: dict[str, list[TypeField]]
    primary_type: str
    domain: TypedDataDomain
    message: dict[str, Any] = field(default_factory=dict)

    def hash_struct(self, primary_type: str, data: dict[str, Any]) -> bytes:
        """Keccak-256 of the encoding of data as primary_type."""
        return keccak256(self.encode_data(primary_type, data, 1))

    def dependencies(self, primary_type: str, found: list[str]) -> list[str]:
        """Custom types reachable from primary_type, in reference order."""
        if primary_type in found or self.types.get(primary_type) is None:
            return found
        found = [*found, primary_type]
        for member in self.types[primary_type]:
            for dep in self.dependencies(member.type, found):
                if dep not in found:
                    found.append(dep)
        return found

    def encode_type(self, primary_type: str) -> bytes:
        """Encode the type as name(type member,...) for it and its dependencies."""
        deps = self.dependencies(primary_type, [])
        if deps:
            deps = [primary_type, *sorted(deps[1:])]
        parts = []
        for dep in deps:
            text = dep + "(" + "".join(f"{m.type} {m.name}," for m in self.types.get(dep) or [])
            parts.append(text[:-1] + ")")
        return "".join(parts).encode()

    def type_hash(self, primary_type: str) -> bytes:
        return keccak256(self.encode_type(primary_type))

    def encode_data(self, primary_type: str, data: dict[str, Any], depth: int) -> bytes:
        """Encode the type hash followed by each member as 32 bytes."""
        members = self.types.get(primary_type) or []
        if len(members) < len(data):
            raise TypedDataError(
                f"there is extra data provided in the message ({len(members)} < {len(data)})"
            )

        out = bytearray(self.type_hash(primary_type))
        for member in members:
            enc_type = member.type
            enc_value = data.get(member.name)
            if enc_type.endswith("]"):
                if not isinstance(enc_value, (list, tuple)):
                    raise _mismatch(enc_type, enc_value)
                parsed_type = enc_type.split("[")[0]
                array = bytearray()
                for item in enc_value:
                    if self.types.get(parsed_type) is not None:
                        if not isinstance(item, dict):
                            raise _mismatch(parsed_type, item)
                        array += self.encode_data(parsed_type, item, depth + 1)
                    else:
                        array += self.encode_primitive_value(parsed_type, item, depth)
                out += keccak256(bytes(array))
            elif self.types.get(enc_type) is not None:
                if not isinstance(enc_value, dict):
                    raise _mismatch(enc_type, enc_value)
                out += keccak256(self.encode_data(enc_type, enc_value, depth + 1))
            else:
                out += self.encode_primitive_value(enc_type, enc_value, depth)
        return bytes(out)

    def encode_primitive_value(self, enc_type: str, enc_value: Any, depth: int) -> bytes:
        """Encode a primitive value as 32 bytes."""
        if enc_type == "address":
            if not isinstance(enc_value, str) or not _is_hex_address(enc_value):
                raise _mismatch(enc_type, enc_value)
            return bytes(12) + bytes.fromhex(enc_value[-40:])
        if enc_type == "bool":
            if not isinstance(enc_value, bool):
                raise _mismatch(enc_type, enc_value)
            return int(enc_value).to_bytes(32, "big")
        if enc_type == "string":
            if not isinstance(enc_value, str):
                raise _mismatch(enc_type, enc_value)
            return keccak256(enc_value.encode())
        if enc_type == "bytes":
            raw = _parse_bytes(enc_value)
            if raw is None:
                raise _mismatch(enc_type, enc_value)
            return keccak256(raw)
        if enc_type.startswith("bytes"):
            length = _parse_size(enc_type[len("bytes"):], "bytes")
            if length < 0 or length > 32:
                raise TypedDataError(f"invalid size on bytes: {length}")
            raw = _parse_bytes(enc_value)
            if raw is None or len(raw) != length:
                raise _mismatch(enc_type, enc_value)
            return raw.ljust(32, b"\x00")
        if enc_type.startswith(("int", "uint")):
            number = _parse_integer(enc_type, enc_value)
            return (number % _U256).to_bytes(32, "big")
        raise TypedDataError(f"unrecognized type '{enc_type}'")

    def to_map(self) -> dict[str, Any]:
        return {
            "types": {
                name: [{"name": m.name, "type": m.type} for m in members]
                for name, members in self.types.items()
            },
            "domain": self.domain.to_map(),
            "primaryType": self.primary_type,
            "message": self.message,
        }


def create_typed_data(
    magic: int, tx_type: str, tx_fields: list[TypeField], msg: dict[str, Any]
) -> TypedData:
    """Build typed data for a transaction in the Spaces domain."""
    return TypedData(
        types={tx_type: list(tx_fields), "EIP712Domain": list(EIP712_DOMAIN)},
        primary_type=tx_type,
        domain=TypedDataDomain(name="Spaces", magic=str(magic)),
        message=msg,
    )


def digest_hash(td: TypedData) -> bytes:
    """Return the 32-byte digest to be signed for the typed data."""
    typed_data_hash = td.hash_struct(td.primary_type, td.message)
    domain_separator = td.hash_struct("EIP712Domain", td.domain.to_map())
    return keccak256(b"\x19\x01" + domain_separator + typed_data_hash)