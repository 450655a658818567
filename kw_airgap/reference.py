"""Parsing and retargeting of image, policy and chart references.

A reference is split into an authority (registry host[:port], or the chart
repository URL), a path and an optional version or tag. Retargeting replaces
only the authority, so that a reference pulled from a public registry can be
pushed to a private one:

```python
from kw_airgap.reference import parse_policy

ref = parse_policy("registry://ghcr.io/kubewarden/policies/safe-labels:v0.1.1")
print(ref.retarget("localhost:5000"))
# registry://localhost:5000/kubewarden/policies/safe-labels:v0.1.1
```
"""

from dataclasses import dataclass, replace

from .exceptions import MalformedReferenceError

__all__ = [
    "Reference",
    "parse_chart",
    "parse_policy",
    "parse_image",
    "retarget_image",
    "retarget_policy",
    "chart_filename",
]

SCHEME_SEPARATOR = "://"
REGISTRY_SCHEME = "registry"
HTTP_SCHEMES = ("http", "https")
CHART_ARCHIVE_EXT = "tgz"
LOCALHOST = "localhost"


@dataclass(frozen=True)
class Reference:
    """Parsed form of an image, policy or chart reference."""

    authority: str | None
    """Registry host[:port], or the repository URL for charts."""

    path: str
    """Path below the authority, e.g. `kubewarden/policies/safe-labels`."""

    version: str | None = None
    """The tag of an image or policy, or the version of a chart."""

    scheme: str | None = None
    """Transport scheme of a policy e.g. `registry` or `https`."""

    digest: str | None = None
    """Content digest of an image pinned with `@sha256:...`."""

    @property
    def name(self) -> str:
        """Return the final path segment e.g. the chart name."""
        return self.path.rsplit("/", 1)[-1]

    def retarget(self, authority: str) -> "Reference":
        """Return a copy of this reference pointing at a different authority."""
        return replace(self, authority=authority)

    def __str__(self) -> str:
        """Render the reference back to its string form."""
        if self.scheme:
            result = f"{self.scheme}{SCHEME_SEPARATOR}{self.authority or ''}/{self.path}"
        elif self.authority:
            result = f"{self.authority}/{self.path}"
        else:
            result = self.path
        if self.version:
            result = f"{result}:{self.version}"
        if self.digest:
            result = f"{result}@{self.digest}"
        return result


def _split_version(value: str) -> tuple[str, str | None]:
    """Split a trailing `:version` from the last path segment."""
    head, sep, last = value.rpartition("/")
    name, colon, version = last.partition(":")
    if not colon:
        return value, None
    return f"{head}{sep}{name}", version


def parse_chart(value: str) -> Reference:
    """Parse a chart reference of the form `repoURL/chartName:version`."""
    repo, sep, last = value.rpartition("/")
    if not sep or not repo:
        raise MalformedReferenceError(
            f"Chart reference '{value}' is missing a repository URL"
        )
    name, colon, version = last.rpartition(":")
    if not colon or not name or not version:
        raise MalformedReferenceError(
            f"Chart reference '{value}' is missing a version"
        )
    return Reference(authority=repo, path=name, version=version)


def parse_policy(value: str) -> Reference:
    """Parse a policy URI.

    Policies published to a registry (`registry://host/path:tag`) must carry a
    tag. Policies downloaded over http(s) or loaded from a local file keep their
    version in the path and have no separate tag.
    """
    if not value:
        raise MalformedReferenceError("Policy reference is empty")
    scheme, sep, rest = value.partition(SCHEME_SEPARATOR)
    if not sep:
        return Reference(authority=None, path=value)
    if not scheme:
        raise MalformedReferenceError(f"Policy reference '{value}' has no scheme")
    authority, slash, path = rest.partition("/")
    if scheme == REGISTRY_SCHEME:
        if not authority or not slash or not path:
            raise MalformedReferenceError(
                f"Policy reference '{value}' is missing a registry or path"
            )
        path, version = _split_version(path)
        if not version:
            raise MalformedReferenceError(
                f"Policy reference '{value}' is missing a tag"
            )
        return Reference(
            authority=authority, path=path, version=version, scheme=scheme
        )
    if not path:
        raise MalformedReferenceError(f"Policy reference '{value}' has no path")
    return Reference(authority=authority or None, path=path, scheme=scheme)


def _is_authority(component: str) -> bool:
    """Return True if the first image path component names a registry."""
    return "." in component or ":" in component or component == LOCALHOST


def parse_image(value: str) -> Reference:
    """Parse an image reference `[host[:port]/]path[:tag][@digest]`."""
    if not value:
        raise MalformedReferenceError("Image reference is empty")
    name, at, digest = value.partition("@")
    if at and not digest:
        raise MalformedReferenceError(f"Image reference '{value}' has an empty digest")
    authority: str | None = None
    first, slash, rest = name.partition("/")
    if slash and _is_authority(first):
        authority, name = first, rest
    path, version = _split_version(name)
    if not path or version == "":
        raise MalformedReferenceError(f"Image reference '{value}' is malformed")
    return Reference(
        authority=authority, path=path, version=version, digest=digest or None
    )


def retarget_image(value: str, registry: str) -> str:
    """Return the image reference rewritten to live in `registry`."""
    return str(parse_image(value).retarget(registry))


def retarget_policy(value: str, registry: str) -> str:
    """Return the policy URI rewritten to live in `registry`.

    Policies fetched over http(s) are pushed to the registry, so the result
    always uses the `registry://` scheme.
    """
    ref = parse_policy(value)
    if ref.scheme is None or ref.authority is None:
        raise MalformedReferenceError(
            f"Policy reference '{value}' has no authority to retarget"
        )
    if ref.scheme in HTTP_SCHEMES:
        ref = replace(ref, scheme=REGISTRY_SCHEME)
    return str(ref.retarget(registry))


def chart_filename(ref: Reference) -> str:
    """Return the local archive name of a chart e.g. `kubewarden-crds-1.2.3.tgz`."""
    return f"{ref.name}-{ref.version}.{CHART_ARCHIVE_EXT}"
