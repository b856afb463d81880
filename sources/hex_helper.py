"""hex_helper.py

Utility class that groups together the small helper functions that deal with
hex text and the base-36 join code carried in the major/minor fields.

Typical usage
-------------
>>> from hex_helper import HexHelper
>>> HexHelper.decode_join_code("0003", "0007")
'47pj'
>>> HexHelper.encode_join_code("47pj")
('0003', '0007')
"""

import string
from typing import Tuple, Union

BASE36_ALPHABET = string.digits + string.ascii_lowercase
JOIN_CODE_HEX_LEN = 8                 # major (4) + minor (4)
JOIN_CODE_MAX = 16 ** JOIN_CODE_HEX_LEN - 1
_HEX_CHARS = frozenset(string.hexdigits)


class HexHelper:
    """Stateless helpers for hex conversion and join-code (de)coding."""

    # ------------------------------------------------------------------
    # Hex conversion helpers
    # ------------------------------------------------------------------
    @staticmethod
    def to_hex_string(byte_array: Union[bytes, bytearray], sep: str = "") -> str:
        """
        Convert a sequence of bytes to an upper-case hex string.

        Example
        -------
        >>> HexHelper.to_hex_string(b"\x01\xab", sep=":")
        '01:AB'
        """
        return sep.join(f"{c:02X}" for c in byte_array)

    @staticmethod
    def is_hex(text: str) -> bool:
        """True when *text* is non-empty and made only of ASCII hex digits."""
        return bool(text) and all(c in _HEX_CHARS for c in text)

    # ------------------------------------------------------------------
    # Base-36 join code
    # ------------------------------------------------------------------
    @staticmethod
    def to_base36(value: int) -> str:
        """Render a non-negative integer with digits ``0-9a-z``."""
        if value < 0:
            raise ValueError(f"negative value cannot be rendered in base 36: {value}")
        if value == 0:
            return "0"
        digits = []
        while value:
            value, rem = divmod(value, 36)
            digits.append(BASE36_ALPHABET[rem])
        return "".join(reversed(digits))

    @classmethod
    def decode_join_code(cls, major: str, minor: str) -> str:
        """
        Reverse the beacon-side encoding: the join code (base-36 text) was
        stored as the hex digits of its numeric value, split over major and
        minor.  Raises ``ValueError`` if the fields are not hex.
        """
        return cls.to_base36(int(f"{major}{minor}", 16))

    @staticmethod
    def encode_join_code(code: str) -> Tuple[str, str]:
        """
        Encode a base-36 join code into ``(major, minor)`` hex fields.

        Raises
        ------
        ValueError
            If *code* is not canonical base-36 (lower case, no leading
            zeros except for "0") or does not fit in 32 bits.
        """
        if not code or not all(c in BASE36_ALPHABET for c in code):
            raise ValueError(f"not a base-36 join code: {code!r}")
        if len(code) > 1 and code.startswith("0"):
            raise ValueError(f"join code has leading zeros: {code!r}")
        value = int(code, 36)
        if value > JOIN_CODE_MAX:
            raise ValueError(f"join code {code!r} does not fit in major/minor")
        hex_value = f"{value:0{JOIN_CODE_HEX_LEN}x}"
        half = JOIN_CODE_HEX_LEN // 2
        return hex_value[:half], hex_value[half:]

    @classmethod
    def build_payload(cls, identity: str, join_code: str, tx_power: int) -> str:
        """
        Assemble a decodable payload from its parts.

        Parameters
        ----------
        identity : str
            32 hex digits, dashes allowed (``8-4-4-4-12``).
        join_code : str
            Base-36 join code.
        tx_power : int
            Calibrated power at 1 m in dBm, ``-256 <= tx_power < 0``.
        """
        raw_identity = identity.replace("-", "")
        if len(raw_identity) != 32 or not cls.is_hex(raw_identity):
            raise ValueError(f"identity must be 32 hex digits: {identity!r}")
        if not -256 <= tx_power < 0:
            raise ValueError(f"tx power out of range: {tx_power}")
        major, minor = cls.encode_join_code(join_code)
        return f"{raw_identity}{major}{minor}{tx_power + 256:02X}"
