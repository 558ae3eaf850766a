from typing import Iterable, List


class TalosPlanError(Exception):
    """Base exception for talosplan."""

    pass


class InvalidSizeClass(TalosPlanError, ValueError):
    """Raised when a size-class descriptor is not of the form CPUxMEMORY."""

    def __init__(self, descriptor: object, reason: str = "expected CPUxMEMORY, e.g. 2x4, 4x8, 8x16"):
        self.descriptor = descriptor
        super().__init__(f"Invalid size class {descriptor!r}: {reason}")


class ClusterSpecError(TalosPlanError):
    """Base exception for malformed or degenerate cluster specifications."""

    def __init__(self, cluster: str, message: str):
        self.cluster = cluster
        super().__init__(f"Cluster '{cluster}': {message}")


class IncompleteSpec(ClusterSpecError):
    """Raised when required fields are absent or non-numeric."""

    def __init__(self, cluster: str, fields: Iterable[str], detail: str = ""):
        self.fields: List[str] = list(fields)
        message = f"missing or invalid fields: {', '.join(self.fields)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(cluster, message)


class EmptyCluster(ClusterSpecError):
    """Raised when a cluster declares zero control planes and zero workers."""

    def __init__(self, cluster: str):
        super().__init__(cluster, "cluster has no control plane and no worker nodes")


class SizeClassMismatch(ClusterSpecError):
    """Raised when the declared size class disagrees with the per-node resources."""

    def __init__(self, cluster: str, declared: str, resolved: str):
        self.declared = declared
        self.resolved = resolved
        super().__init__(
            cluster,
            f"size class '{declared}' does not match per-node resources ({resolved})",
        )


class MissingBootImage(TalosPlanError):
    """Raised when one or more required boot image versions are not registered."""

    def __init__(self, site_code: str, versions: Iterable[str]):
        self.site_code = site_code
        self.versions: List[str] = list(versions)
        super().__init__(
            f"Site '{site_code}' is missing boot images for version(s): {', '.join(self.versions)}. "
            f"Prepare them first (one image per version) and re-run."
        )


class ArtifactError(TalosPlanError):
    """Base exception for the infrastructure-variable artifact."""

    pass


class MissingArtifact(ArtifactError):
    """Raised when the target artifact does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Infrastructure variable file not found: {path}")


class ArtifactLocked(ArtifactError):
    """Raised when another reconciliation holds the artifact lock."""

    def __init__(self, path, timeout_sec: float):
        self.path = path
        super().__init__(f"Could not lock {path} within {timeout_sec}s; another reconciliation is running")


class SiteError(TalosPlanError):
    """Base exception for site lookup errors."""

    pass


class InvalidSiteCode(SiteError):
    """Raised when a site code does not follow <city><zone><env>."""

    def __init__(self, site_code: str):
        self.site_code = site_code
        super().__init__(
            f"Invalid site code '{site_code}'. Expected 2 lowercase letters + 1 digit + environment (d/s/p), e.g. dk1d"
        )


class SiteNotFound(SiteError):
    """Raised when the site directory or its metadata does not exist."""

    pass


class UnsupportedPlatform(SiteError):
    """Raised when a platform is missing or not one of the supported hypervisors."""

    pass


class NoClusterSpecs(SiteError):
    """Raised when a site has no cluster documents to reconcile."""

    def __init__(self, site_code: str, site_dir):
        self.site_code = site_code
        super().__init__(f"No cluster configurations found for site '{site_code}' in {site_dir}")
