"""Read-only data sources."""

from gitlab_provisioner.data.protected_branches import (
    ProtectedBranch,
    ProtectedBranches,
    read_protected_branches,
)

__all__ = ["ProtectedBranch", "ProtectedBranches", "read_protected_branches"]
