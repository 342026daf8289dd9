"""
Meridian Threshold Secret Sharing

Shamir secret sharing over GF(256) with reduction polynomial
x^8 + x^4 + x^3 + x + 1 (0x11B).

Each secret byte is the constant term of its own random polynomial of
degree T-1, evaluated at x = 1..N. Any T shares reconstruct the secret by
Lagrange interpolation at x = 0; fewer reveal nothing.

Field multiply and inversion run a fixed number of iterations with
mask-based reduction, so their timing does not depend on operand values.
"""

import secrets
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .errors import InsufficientShares, InvalidConfiguration

MAX_SHARES = 255


def gf_mul(a: int, b: int) -> int:
    """Multiply in GF(256). Eight rounds regardless of operands."""
    product = 0
    for _ in range(8):
        product ^= -(b & 1) & a
        carry = -(a >> 7) & 0x1B
        a = ((a << 1) & 0xFF) ^ carry
        b >>= 1
    return product & 0xFF


def gf_inv(a: int) -> int:
    """Multiplicative inverse as a^254 (Fermat). Maps 0 to 0."""
    result = 1
    square = a
    for _ in range(7):
        square = gf_mul(square, square)
        result = gf_mul(result, square)
    return result


def gf_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("division by zero in GF(256)")
    return gf_mul(a, gf_inv(b))


def _evaluate(coefficients: Sequence[int], x: int) -> int:
    """Horner evaluation; coefficients[0] is the constant term."""
    y = 0
    for c in reversed(coefficients):
        y = gf_mul(y, x) ^ c
    return y


@dataclass(frozen=True)
class ShamirShare:
    """One share: 1-indexed x coordinate and one byte per secret byte."""
    index: int
    data: bytes

    def to_dict(self) -> Dict:
        return {"index": self.index, "data": self.data.hex()}

    def encode(self) -> str:
        """Compact text form ``<index>-<hex>`` for handing to custodians."""
        return f"{self.index}-{self.data.hex()}"

    @classmethod
    def decode(cls, text: str) -> "ShamirShare":
        try:
            index, data = text.strip().split("-", 1)
            return cls(index=int(index), data=bytes.fromhex(data))
        except ValueError:
            raise InvalidConfiguration(f"Malformed share: {text!r}")


class ShamirSecretSharing:
    """
    T-of-N secret sharing.

    Args:
        threshold: Shares required to reconstruct (T).
        total_shares: Shares produced by ``split`` (N).

    Raises:
        InvalidConfiguration: Unless 2 <= T <= N <= 255.
    """

    def __init__(self, threshold: int, total_shares: int):
        if not (isinstance(threshold, int) and isinstance(total_shares, int)):
            raise InvalidConfiguration("threshold and total_shares must be integers")
        if not 2 <= threshold <= total_shares <= MAX_SHARES:
            raise InvalidConfiguration(
                "require 2 <= threshold <= total_shares <= 255",
                {"threshold": threshold, "total_shares": total_shares},
            )
        self.threshold = threshold
        self.total_shares = total_shares

    def split(self, secret: bytes) -> List[ShamirShare]:
        """Split ``secret`` into N shares. Two calls never share coefficients."""
        if not isinstance(secret, (bytes, bytearray)) or len(secret) == 0:
            raise InvalidConfiguration("secret must be non-empty bytes")

        payloads = [bytearray(len(secret)) for _ in range(self.total_shares)]
        for pos, byte in enumerate(secret):
            coefficients = [byte] + list(secrets.token_bytes(self.threshold - 1))
            for i in range(self.total_shares):
                payloads[i][pos] = _evaluate(coefficients, i + 1)

        return [ShamirShare(index=i + 1, data=bytes(p)) for i, p in enumerate(payloads)]

    def reconstruct(self, shares: Sequence[ShamirShare]) -> bytes:
        """
        Recover the secret from the first T of ``shares``.

        Extra shares beyond T are ignored, not cross-checked.

        Raises:
            InsufficientShares: Fewer than T shares supplied.
            InvalidConfiguration: Duplicate or out-of-range indices, or
                payloads of different lengths.
        """
        if len(shares) < self.threshold:
            raise InsufficientShares(
                f"need {self.threshold} shares, got {len(shares)}",
                {"required": self.threshold, "observed": len(shares)},
            )
        used = list(shares[:self.threshold])

        xs = [s.index for s in used]
        if any(not isinstance(x, int) or not 1 <= x <= MAX_SHARES for x in xs):
            raise InvalidConfiguration("share indices must be in 1..255", {"indices": xs})
        if len(set(xs)) != len(xs):
            raise InvalidConfiguration("duplicate share indices", {"indices": xs})
        length = len(used[0].data)
        if length == 0 or any(len(s.data) != length for s in used):
            raise InvalidConfiguration("share payloads differ in length")

        bases = []
        for i, xi in enumerate(xs):
            basis = 1
            for j, xj in enumerate(xs):
                if i != j:
                    basis = gf_mul(basis, gf_div(xj, xj ^ xi))
            bases.append(basis)

        secret = bytearray(length)
        for pos in range(length):
            value = 0
            for share, basis in zip(used, bases):
                value ^= gf_mul(share.data[pos], basis)
            secret[pos] = value
        return bytes(secret)
