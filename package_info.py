"""
Package size record and byte formatting helpers
"""
from dataclasses import dataclass
from typing import Iterable, List

SIZE_UNITS = "KMGTPE"
UNIT = 1024

CSV_HEADER = ['Package Name', 'Size (Bytes)', 'Size (Pretty)']


def format_bytes(num_bytes: int) -> str:
    """
    Convert a byte count to a human-readable string using 1024-based units.

    Args:
        num_bytes: Non-negative byte count

    Returns:
        "512 Bytes" below 1 KB, otherwise e.g. "2.00 KB" or "976.56 KB"
    """
    if num_bytes < 0:
        raise ValueError(f"Byte count must be non-negative, got {num_bytes}")
    if num_bytes < UNIT:
        return f"{num_bytes} Bytes"

    div, exp = UNIT, 0
    n = num_bytes // UNIT
    while n >= UNIT and exp < len(SIZE_UNITS) - 1:
        div *= UNIT
        exp += 1
        n //= UNIT
    return f"{num_bytes / div:.2f} {SIZE_UNITS[exp]}B"


@dataclass(frozen=True)
class PackageInfo:
    """Unpacked size of the latest published version of one package"""

    name: str
    raw_size: int
    pretty_size: str

    @classmethod
    def from_size(cls, name: str, raw_size: int) -> 'PackageInfo':
        return cls(name=name, raw_size=raw_size, pretty_size=format_bytes(raw_size))

    def as_row(self) -> List[str]:
        """Row matching CSV_HEADER"""
        return [self.name, str(self.raw_size), self.pretty_size]


def sort_package_infos(infos: Iterable[PackageInfo]) -> List[PackageInfo]:
    """Largest first; equal sizes ordered by name so repeated runs match"""
    return sorted(infos, key=lambda info: (-info.raw_size, info.name))
