"""
kw-airgap moves the platform's images, policies and charts into an air-gapped cluster.

The work happens in four phases that share a `DependencyManifest`:

  - `kw_airgap.builder` discovers the artifacts of the current release
  - `kw_airgap.pull` pulls them into local archives
  - `kw_airgap.push` replays the archives into a private registry
  - `kw_airgap.install` installs the charts against that registry
"""

__all__ = [
    "builder",
    "config",
    "exceptions",
    "install",
    "manifest",
    "pull",
    "push",
    "reference",
    "transport",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
