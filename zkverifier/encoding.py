"""
Public Signal Encoding
======================

[WIRE] ZK circuits emit every public signal as a decimal big integer. Text and
binary fields are packed into the integer magnitude:

    "UKR"  ->  b"UKR"  ->  int.from_bytes(b"UKR", "big")  ->  "5589842"

Decoding takes the minimal big-endian bytes of the integer. Leading zero
bytes are not representable in this scheme, pass an explicit size when the
payload width is known.

Dates are 6 ASCII digits in YYMMDD layout, packed the same way.
"""

import re
from datetime import date, datetime
from typing import Optional

from .errors import RuleError

# "000000" packed as integer: the circuit emits it for dates that are not
# revealed by the selector
EMPTY_ZK_DATE = "52983525027888"

ZK_DATE_FORMAT = "%y%m%d"

ROOT_SIZE = 32

_DECIMAL_RE = re.compile(r"^[0-9]+$")


def parse_decimal(value: str) -> Optional[int]:
    """Parse a non-negative decimal string, None when it is not one."""
    if not isinstance(value, str) or not _DECIMAL_RE.match(value):
        return None
    return int(value, 10)


def decode_bytes(value: str, size: Optional[int] = None) -> bytes:
    """
    Decode decimal big integer to big-endian bytes.

    Args:
        value: Decimal string from public signals
        size: Fixed output width; minimal width when None

    Returns:
        Raw bytes, empty on unparsable input
    """
    number = parse_decimal(value)
    if number is None:
        return b""
    if size is None:
        size = (number.bit_length() + 7) // 8
    try:
        return number.to_bytes(size, "big")
    except OverflowError:
        return b""


def decode_text(value: str) -> str:
    """Decode decimal big integer to the text packed into its bytes."""
    return decode_bytes(value).decode("latin-1")


def encode_bytes(data: bytes) -> str:
    """Pack raw bytes into a decimal big integer string."""
    return str(int.from_bytes(data, "big"))


def encode_text(text: str) -> str:
    """Pack text into a decimal big integer string."""
    return encode_bytes(text.encode("latin-1"))


def encode_date(day: date) -> str:
    """Pack a calendar day the way the circuit does."""
    return encode_text(day.strftime(ZK_DATE_FORMAT))


def decimal_to_32_bytes(value: str) -> Optional[bytes]:
    """
    Convert a decimal root to its fixed 32-byte big-endian form.

    Returns None when the value is not a decimal or does not fit 32 bytes.
    """
    number = parse_decimal(value)
    if number is None or number.bit_length() > ROOT_SIZE * 8:
        return None
    return number.to_bytes(ROOT_SIZE, "big")


def parse_zk_date(value: str) -> date:
    """
    Decode a packed YYMMDD date.

    Raises:
        RuleError: value is not a decimal or does not hold a valid date
    """
    if parse_decimal(value) is None:
        raise RuleError(f"failed to parse big integer: {value!r}")

    raw = decode_text(value)
    try:
        return datetime.strptime(raw, ZK_DATE_FORMAT).date()
    except ValueError as e:
        raise RuleError(f"invalid date string: {e}") from e


def is_empty_zk_date(value: str) -> bool:
    """ZKP sets dates to 0 or "000000" when not used or absent in selector."""
    return value in ("0", EMPTY_ZK_DATE)
