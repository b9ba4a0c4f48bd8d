import re


def _to_size_suffix(size: int) -> str:
    def _convert(size: int) -> tuple[float, str]:
        val: float
        unit: str
        if size < 1024:
            val = size
            unit = "B"
        elif size < 1024**2:
            val = size / 1024
            unit = "K"
        elif size < 1024**3:
            val = size / (1024**2)
            unit = "M"
        elif size < 1024**4:
            val = size / (1024**3)
            unit = "G"
        elif size < 1024**5:
            val = size / (1024**4)
            unit = "T"
        else:
            raise ValueError(f"Invalid size: {size}")

        return val, unit

    def _fmt(_val: float | int, _unit: str) -> str:
        # Whole values drop the decimal, anything else keeps one digit.
        val_str: str = str(_val)
        if not val_str.endswith(".0") and isinstance(_val, float):
            first_str: str = f"{_val:.1f}"
        else:
            first_str = str(int(_val))
        return first_str + _unit

    val, unit = _convert(size)
    return _fmt(val, unit)


# Allows decimals (e.g., 16.5MB)
_PATTERN_SIZE_SUFFIX = re.compile(r"^(\d+(?:\.\d+)?)([A-Za-z]*)$")


def _from_size_suffix(size: str) -> int:
    match = _PATTERN_SIZE_SUFFIX.match(size.strip())
    if match is None:
        raise ValueError(f"Invalid size suffix: {size}")
    num_str, suffix = match.group(1), match.group(2)
    n = float(num_str)
    if not suffix:
        return int(n)
    # Determine the unit from the first letter (e.g., "M" from "MB")
    unit = suffix[0].upper()
    if unit == "B":
        return int(n)
    if unit == "K":
        return int(n * 1024)
    if unit == "M":
        return int(n * 1024**2)
    if unit == "G":
        return int(n * 1024**3)
    if unit == "T":
        return int(n * 1024**4)
    raise ValueError(f"Invalid size suffix: {suffix}")


class SizeSuffix:
    """Byte count that parses and prints human sizes like 5M or 16.5MB."""

    def __init__(self, size: "int | str | SizeSuffix"):
        self._size: int
        if isinstance(size, SizeSuffix):
            self._size = size._size
        elif isinstance(size, int):
            self._size = size
        elif isinstance(size, str):
            self._size = _from_size_suffix(size)
        elif isinstance(size, float):
            self._size = int(size)
        else:
            raise ValueError(f"Invalid type for size: {type(size)}")

    def as_int(self) -> int:
        return self._size

    def as_str(self) -> str:
        return _to_size_suffix(self._size)

    def __repr__(self) -> str:
        return self.as_str()

    def __str__(self) -> str:
        return self.as_str()

    def __int__(self) -> int:
        return self._size

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SizeSuffix):
            return self._size == other._size
        if isinstance(other, int):
            return self._size == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._size)
