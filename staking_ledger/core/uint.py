"""Overflow-checked unsigned integer helpers."""
from .errors import Overflow

UINT256_MAX = 2**256 - 1


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise Overflow(f"{a} + {b} exceeds uint256")
    return result


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > UINT256_MAX:
        raise Overflow(f"{a} * {b} exceeds uint256")
    return result


def is_uint(value) -> bool:
    """True for non-negative ints in range (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= UINT256_MAX
