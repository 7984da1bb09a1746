from typing import Callable, Tuple, TypeVar

T = TypeVar("T")


def parse_pair(token: str, separator: str, convert: Callable[[str], T]) -> Tuple[T, T]:
    """
    Parse "<left><separator><right>", e.g. "800x600" or "-1.5,0.25".
    Raises ValueError if the separator is missing or either side fails to convert.
    """
    token = token.strip()
    left, sep, right = token.partition(separator)
    if not sep or not left.strip() or not right.strip():
        raise ValueError(f"Expected a pair like 'a{separator}b', got '{token}'")
    return convert(left.strip()), convert(right.strip())


def parse_dimensions(token: str) -> Tuple[int, int]:
    """
    Parse resolution like "1000x750".
    """
    width, height = parse_pair(token.lower(), 'x', int)
    if width <= 0 or height <= 0:
        raise ValueError(f"Dimensions must be positive, got '{token}'")
    return width, height


def parse_complex(token: str) -> complex:
    """
    Parse a point like "-1.20,0.35" into complex(-1.20, 0.35).
    """
    re, im = parse_pair(token, ',', float)
    return complex(re, im)
