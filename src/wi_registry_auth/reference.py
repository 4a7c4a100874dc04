"""Artifact reference parsing.

References follow the ORAS grammar, where the registry is always explicit:

    {registry}/{repository}[:{tag}|@{digest}]

Examples:
    myregistry.azurecr.io/net-monitor:v1
    localhost:5000/library/alpine@sha256:<64 hex>

Unlike Docker references there is no implicit "docker.io" registry, so the
first path component is always taken as the registry host.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

# Conservative regex patterns for validation
_REPOSITORY_RE = re.compile(
    r"^[a-z0-9]+(?:(?:[._]|__|[-]*)[a-z0-9]+)*(?:/[a-z0-9]+(?:(?:[._]|__|[-]*)[a-z0-9]+)*)*$"
)
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST_RE = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+$")
_SHA256_HEX_RE = re.compile(r"^[a-f0-9]{64}$")


class InvalidReferenceError(ValueError):
    """Raised when an artifact reference cannot be parsed."""
    pass


@dataclass(frozen=True)
class Reference:
    """Parsed artifact reference.

    Attributes:
        registry: Registry host, optionally with port
        repository: Repository path inside the registry
        tag: Tag, if the reference names one and no digest
        digest: Digest, if present (takes precedence over a tag)
    """
    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    def __str__(self) -> str:
        base = f"{self.registry}/{self.repository}"
        if self.digest:
            return f"{base}@{self.digest}"
        if self.tag:
            return f"{base}:{self.tag}"
        return base


def _validate_registry(registry: str, reference: str) -> None:
    try:
        parsed = urlsplit(f"//{registry}")
        # Accessing port validates it is numeric and in range
        parsed.port
    except ValueError as e:
        raise InvalidReferenceError(f"invalid registry in reference {reference!r}: {e}") from e
    if not parsed.hostname or parsed.netloc != registry or parsed.username or parsed.password:
        raise InvalidReferenceError(f"invalid registry in reference {reference!r}")


def _validate_digest(digest: str, reference: str) -> None:
    if not _DIGEST_RE.match(digest):
        raise InvalidReferenceError(f"invalid digest in reference {reference!r}")
    algorithm, _, encoded = digest.partition(":")
    if algorithm == "sha256" and not _SHA256_HEX_RE.match(encoded):
        raise InvalidReferenceError(
            f"invalid sha256 digest in reference {reference!r}: expected 64 lowercase hex characters"
        )


def parse_reference(reference: str) -> Reference:
    """Parse an artifact reference into its components.

    Args:
        reference: Reference string like "myacr.azurecr.io/app:v1"

    Returns:
        Parsed Reference

    Raises:
        InvalidReferenceError: If the reference is malformed
    """
    registry, sep, path = reference.partition("/")
    if not sep or not registry or not path:
        raise InvalidReferenceError(
            f"invalid reference {reference!r}: missing registry or repository"
        )
    _validate_registry(registry, reference)

    tag = digest = None
    if "@" in path:
        path, _, digest = path.partition("@")
        _validate_digest(digest, reference)
        # "repo:tag@digest" is accepted; the digest wins
        if ":" in path:
            path, _, _ignored_tag = path.partition(":")
    elif ":" in path:
        path, _, tag = path.partition(":")
        if not _TAG_RE.match(tag):
            raise InvalidReferenceError(f"invalid tag in reference {reference!r}")

    if not _REPOSITORY_RE.match(path):
        raise InvalidReferenceError(f"invalid repository in reference {reference!r}")

    return Reference(registry=registry, repository=path, tag=tag, digest=digest)


def registry_host(reference: str) -> str:
    """Return the registry host of an artifact reference.

    This is the default HostResolver used by the credential provider.
    """
    return parse_reference(reference).registry


__all__ = [
    "InvalidReferenceError",
    "Reference",
    "parse_reference",
    "registry_host",
]
