"""Integer and UTF-8 string scalars of the MessagePack data model."""

from __future__ import annotations

from dataclasses import dataclass

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class Integer:
    """A MessagePack integer, limited to the range -(2^63) up to 2^64 - 1."""

    n: int

    def __post_init__(self) -> None:
        if isinstance(self.n, bool) or not isinstance(self.n, int):
            raise TypeError(f"integer expected, got {type(self.n).__name__}")
        if not I64_MIN <= self.n <= U64_MAX:
            raise OverflowError(f"{self.n} does not fit a MessagePack integer")

    def is_i64(self) -> bool:
        """Whether the integer can be represented as a signed 64-bit value."""
        return self.n <= I64_MAX

    def is_u64(self) -> bool:
        """Whether the integer can be represented as an unsigned 64-bit value."""
        return self.n >= 0

    def as_i64(self) -> int | None:
        return self.n if self.is_i64() else None

    def as_u64(self) -> int | None:
        return self.n if self.is_u64() else None

    def as_f64(self) -> float:
        return float(self.n)

    def __int__(self) -> int:
        return self.n

    def __str__(self) -> str:
        return str(self.n)


class Utf8String:
    """A MessagePack string that keeps its raw bytes when they are not valid UTF-8."""

    __slots__ = ("_text", "_raw", "_error")

    def __init__(self, data: str | bytes | bytearray | memoryview) -> None:
        if isinstance(data, str):
            self._text: str | None = data
            self._raw = data.encode("utf-8")
            self._error: UnicodeDecodeError | None = None
        elif isinstance(data, (bytes, bytearray, memoryview)):
            self._raw = bytes(data)
            try:
                self._text = self._raw.decode("utf-8")
                self._error = None
            except UnicodeDecodeError as exc:
                self._text = None
                self._error = exc
        else:
            raise TypeError(f"str or bytes expected, got {type(data).__name__}")

    def is_str(self) -> bool:
        return self._text is not None

    def is_err(self) -> bool:
        return self._text is None

    def as_str(self) -> str | None:
        return self._text

    def as_err(self) -> UnicodeDecodeError | None:
        return self._error

    def as_bytes(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        if self._text is not None:
            return f'"{self._text}"'
        return "[" + ", ".join(str(b) for b in self._raw) + "]"

    def __repr__(self) -> str:
        payload = self._text if self._text is not None else self._raw
        return f"Utf8String({payload!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Utf8String):
            return NotImplemented
        return self.is_str() == other.is_str() and self._raw == other._raw

    def __hash__(self) -> int:
        return hash((self.is_str(), self._raw))