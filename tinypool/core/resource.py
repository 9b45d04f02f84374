"""Example pooled item: a named resource with a serial number."""

from dataclasses import dataclass
from typing import List


@dataclass(eq=False)
class Resource:
    """
    An opaque, expensive-to-construct object handed out by a pool.

    eq=False keeps identity semantics: two resources with the same name are
    still two different pool items.
    """
    name: str
    serial: int

    def __repr__(self) -> str:
        return f"{self.name}#{self.serial}"


def make_resources(count: int, prefix: str = "resource") -> List[Resource]:
    """Create `count` resources with serials 1..count."""
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    return [Resource(name=f"{prefix}-{i}", serial=i) for i in range(1, count + 1)]
