"""
Store version classification.

Elasticsearch changed its wire format twice around mapping types:
  - before 7.0.0, index-creation mappings are nested under a type name
  - before 8.0.0, bulk index actions carry a `_type` discriminator
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from esbulk.errors import VersionError


LEGACY_TYPE_NAME = "_doc"

_VERSION_RE = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)"
    r"(?:-([0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass(frozen=True)
class StoreVersion:
    major: int
    minor: int
    patch: int
    prerelease: str = ""

    def _key(self) -> Tuple[int, int, int, int]:
        # A pre-release sorts before the release it precedes (8.0.0-rc1 < 8.0.0).
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1)

    def before(self, major: int) -> bool:
        """True when this version is strictly lower than `<major>.0.0`."""
        return self._key() < (int(major), 0, 0, 1)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


def parse_version(text: str) -> StoreVersion:
    m = _VERSION_RE.match(str(text or "").strip())
    if not m:
        raise VersionError(f"invalid store version {text!r}")
    major, minor, patch, pre = m.groups()
    return StoreVersion(int(major), int(minor), int(patch), pre or "")


@dataclass(frozen=True)
class CompatPolicy:
    """
    Wire-format decisions derived from the target store version.

    `mapping_type_name`: wrap index-creation properties under `_doc`.
    `action_doc_type`: add `_type: _doc` to every bulk index action.
    """

    mapping_type_name: bool = False
    action_doc_type: bool = False

    @classmethod
    def for_version(cls, version: StoreVersion) -> "CompatPolicy":
        return cls(mapping_type_name=version.before(7), action_doc_type=version.before(8))

    @classmethod
    def for_version_string(cls, text: Optional[str]) -> "CompatPolicy":
        if text is None:
            return cls()
        return cls.for_version(parse_version(text))


__all__ = ["LEGACY_TYPE_NAME", "StoreVersion", "parse_version", "CompatPolicy"]
