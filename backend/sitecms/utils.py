from typing import Optional, Union

from .errors import ValidationError


def require_fields(*values: Optional[str], detail: str = "All fields are required") -> None:
    """Every value must be present and not just whitespace."""
    for value in values:
        if value is None or not str(value).strip():
            raise ValidationError(detail)


# primary keys are 32-bit integer columns
MAX_ID = 2**31 - 1


def parse_id(raw: Union[int, str, None]) -> Optional[int]:
    """A usable primary key, or None for anything that cannot name a row."""
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if 0 < value <= MAX_ID else None
