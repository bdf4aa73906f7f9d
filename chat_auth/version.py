"""Server version parsing and comparison."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerVersion:
    """Semantic version reported by a chat server."""

    major: int
    minor: int
    patch: int
    release_tag: str | None = None
    raw: str = "0.0.0"

    def __str__(self) -> str:
        return self.raw


def _version_number(parts: list[str], index: int) -> int:
    """Component at ``index`` as an int; anything but plain ASCII digits is 0."""
    if index >= len(parts):
        return 0
    part = parts[index]
    if not (part.isascii() and part.isdigit()):
        return 0
    return int(part)


def parse_version(raw: str) -> ServerVersion:
    """Parse a version string such as ``0.62.0`` or ``1.2.3-rc1``.

    Never raises: missing or non-numeric components become 0.
    """
    prefix, _, release = raw.partition("-")
    parts = prefix.split(".")
    return ServerVersion(
        major=_version_number(parts, 0),
        minor=_version_number(parts, 1),
        patch=_version_number(parts, 2),
        release_tag=release.split("-")[0] or None,
        raw=raw,
    )


def is_at_least(actual: ServerVersion, required: ServerVersion) -> bool:
    """Return True if ``actual`` is equal to or newer than ``required``.

    Release tags are informational and never compared.
    """
    return (actual.major, actual.minor, actual.patch) >= (
        required.major,
        required.minor,
        required.patch,
    )
