import math
import re
from typing import Any, Optional

# Everything that cannot be part of a number: currency symbols, spaces, letters
_NON_NUMERIC = re.compile(r"[^0-9.,\-]")
_EXPONENT = re.compile(r"\d[eE][+-]?\d")


def parse_decimal(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Parse a locale-formatted amount ("1.250,50 €", "60.00", "27,5 %").

    Both "." and "," are accepted as decimal separator. When both occur, the
    right-most one is the decimal separator. A separator that occurs more than
    once is a thousands separator. Returns `default` instead of raising.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
        return number if math.isfinite(number) else default

    raw = str(value).strip()
    if _EXPONENT.search(raw):
        # "1e5" only makes sense as plain scientific notation
        try:
            number = float(raw)
        except ValueError:
            return default
        return number if math.isfinite(number) else default

    text = _NON_NUMERIC.sub("", raw)
    negative = text.startswith("-")
    text = text.lstrip("-")
    if not text or "-" in text:
        return default

    last_dot, last_comma = text.rfind("."), text.rfind(",")
    if last_dot >= 0 and last_comma >= 0:
        decimal_sep = "." if last_dot > last_comma else ","
        thousands_sep = "," if decimal_sep == "." else "."
        text = text.replace(thousands_sep, "").replace(decimal_sep, ".")
    elif last_dot >= 0 or last_comma >= 0:
        sep = "." if last_dot >= 0 else ","
        if text.count(sep) > 1:
            text = text.replace(sep, "")
        else:
            text = text.replace(sep, ".")

    try:
        number = float(text)
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return -number if negative else number


def parse_int(value: Any, default: int = 0) -> int:
    """
    Parse an integral value ("4", 4.0, "4★"). Fractions and garbage give `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass

    number = parse_decimal(text, default=None)
    if number is None or not number.is_integer():
        return default
    return int(number)


def format_de(value: float, max_fraction_digits: int = 3) -> str:
    """
    de-DE number rendering: 60000 -> "60.000", 50000.01 -> "50.000,01".
    """
    text = f"{value:,.{max_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text.replace(",", "_").replace(".", ",").replace("_", ".")
