"""
Group and member labels.

Groups are lettered in discovery order: A..Z, then AA, AB, ..., AZ, BA, ...
(bijective base-26, the spreadsheet column scheme), so there is no upper
limit on the number of groups. `label_sort_key` orders labels by length
first, which keeps discovery order once labels grow to two letters
("Plane_Z" < "Plane_AA").
"""

import string
from typing import Tuple

_LETTERS = string.ascii_uppercase


def letters(index: int) -> str:
    """0 -> 'A', 25 -> 'Z', 26 -> 'AA', 701 -> 'ZZ', 702 -> 'AAA'."""
    if index < 0:
        raise ValueError(f"Group index must be non-negative, got {index}")
    out = []
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        out.append(_LETTERS[rem])
    return "".join(reversed(out))


def group_label(index: int, prefix: str = "") -> str:
    """Label of the index-th discovered group, e.g. `Plane_C` for 2."""
    return f"{prefix}{letters(index)}"


def member_label(class_label: str, position: int) -> str:
    """Label of a ranked member: `<classLabel>-<position>`."""
    return f"{class_label}-{position}"


def label_sort_key(label: str) -> Tuple[int, str]:
    """Sort key keeping discovery order for labels with a shared prefix."""
    return (len(label), label)
