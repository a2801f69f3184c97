"""Semantic version helpers.

Pure functions, no I/O. Used by the registry client for fallback cycle
matching and by any caller that needs to normalise a version string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_SEMVER_RE = re.compile(
    r"^(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+))?"
    r"(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True)
class SemanticVersion:
    """Components of a parsed version.

    ``minor`` and ``patch`` are ``None`` when the version omits them; they are
    never zero-filled.
    """

    major: int
    minor: int | None = None
    patch: int | None = None
    prerelease: str | None = None
    build: str | None = None


def clean_version(version: str) -> str:
    """Strip surrounding whitespace and a single leading ``v``/``V``.

    Never raises: input that is not a version comes back trimmed.
    """
    cleaned = version.strip()
    if cleaned[:1] in ("v", "V"):
        cleaned = cleaned[1:].strip()
    return cleaned


def is_semantic_version(version: str) -> bool:
    return _SEMVER_RE.match(clean_version(version)) is not None


def parse_semantic_version(version: str) -> SemanticVersion | None:
    match = _SEMVER_RE.match(clean_version(version))
    if match is None:
        return None
    minor = match.group("minor")
    patch = match.group("patch")
    return SemanticVersion(
        major=int(match.group("major")),
        minor=int(minor) if minor is not None else None,
        patch=int(patch) if patch is not None else None,
        prerelease=match.group("prerelease"),
        build=match.group("build"),
    )


def get_semantic_fallbacks(version: str) -> list[str]:
    """Return cycle candidates from most to least specific.

    ``"1.2.3"`` → ``["1.2.3", "1.2", "1"]``. Segments keep their original
    text so ``"22.04.1"`` yields ``"22.04"``, not ``"22.4"``. A version that
    is not semantic yields only itself.
    """
    cleaned = clean_version(version)
    if not cleaned:
        return []

    match = _SEMVER_RE.match(cleaned)
    if match is None:
        return [cleaned]

    candidates = [cleaned]
    major = match.group("major")
    minor = match.group("minor")
    if minor is not None:
        candidates.append(f"{major}.{minor}")
    candidates.append(major)

    # "1.2" and "1" already appear as the full version; keep first occurrence.
    return list(dict.fromkeys(candidates))
