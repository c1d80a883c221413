"""Project-level versioning and compatibility metadata for refeed-dedup."""

from __future__ import annotations

from pathlib import Path
from typing import Final, Tuple

MIN_PYTHON_VERSION: Final[Tuple[int, int]] = (3, 10)
MIN_PYTHON_VERSION_STR: Final[str] = ".".join(str(part) for part in MIN_PYTHON_VERSION)
PYTHON_REQUIRES_SPECIFIER: Final[str] = f">={MIN_PYTHON_VERSION_STR}"


class VersionMetadata:
    """Immutable semantic version triple."""

    __slots__ = ("major", "minor", "patch")

    def __init__(self, major: int, minor: int, patch: int) -> None:
        for attribute_name, value in (
            ("major", major),
            ("minor", minor),
            ("patch", patch),
        ):
            if value < 0:
                raise ValueError(f"{attribute_name} must be non-negative, got {value}")
        object.__setattr__(self, "major", major)
        object.__setattr__(self, "minor", minor)
        object.__setattr__(self, "patch", patch)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("VersionMetadata instances are read-only")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, text: str) -> "VersionMetadata":
        parts = text.strip().split(".")
        if len(parts) != 3:
            raise ValueError(f"expected MAJOR.MINOR.PATCH, got {text!r}")
        major, minor, patch = (int(part) for part in parts)
        return cls(major, minor, patch)

    @property
    def tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


_VERSION_FILE = Path(__file__).resolve().parent.parent / "VERSION"


def _read_version() -> str:
    if _VERSION_FILE.exists():
        return _VERSION_FILE.read_text(encoding="utf-8").strip()
    # Installed without the source tree: fall back to distribution metadata.
    from importlib.metadata import version

    return version("refeed-dedup")


PROJECT_VERSION: Final[str] = _read_version()
VERSION_INFO: Final[VersionMetadata] = VersionMetadata.parse(PROJECT_VERSION)
__version__: Final[str] = PROJECT_VERSION

__all__ = [
    "MIN_PYTHON_VERSION",
    "MIN_PYTHON_VERSION_STR",
    "PYTHON_REQUIRES_SPECIFIER",
    "PROJECT_VERSION",
    "VERSION_INFO",
    "__version__",
    "VersionMetadata",
]
