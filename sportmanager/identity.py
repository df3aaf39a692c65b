from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidIdentity

EXTERNAL_PREFIX = "ext:"

# Signed 64-bit, the width of the external_id column
EXTERNAL_ID_MIN = -2 ** 63
EXTERNAL_ID_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Identity:
    identity: str
    display_name: str
    external_id: Optional[int] = None


def _coerce_external_id(external_id: Union[int, str]) -> int:
    # bool is an int subclass; JSON true/false is not an id
    if isinstance(external_id, bool):
        raise InvalidIdentity(f"Invalid external id: {external_id!r}")
    if isinstance(external_id, int):
        value = external_id
    elif isinstance(external_id, str) and external_id.strip().lstrip('-').isdigit():
        value = int(external_id.strip())
    else:
        raise InvalidIdentity(f"Invalid external id: {external_id!r}")
    if not EXTERNAL_ID_MIN <= value <= EXTERNAL_ID_MAX:
        raise InvalidIdentity(f"External id out of range: {value}")
    return value


def resolve(claimed_name: Optional[str], external_id: Union[int, str, None] = None) -> Identity:
    """
    Map a claimed display name and optional external platform id to the
    stable key used for roster uniqueness.

    An external id wins over the name so a player keeps the same identity
    when they rename themselves; otherwise the trimmed name is the identity.
    """
    display_name = claimed_name if isinstance(claimed_name, str) else ""

    if external_id is not None:
        ext = _coerce_external_id(external_id)
        return Identity(f"{EXTERNAL_PREFIX}{ext}", display_name, ext)

    normalized = display_name.strip()
    if not normalized:
        raise InvalidIdentity("Player name is required")
    return Identity(normalized, display_name)
