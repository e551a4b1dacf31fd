"""Central exports for ProjectHub SQLAlchemy models."""

from .membership import ACTIVE_MEMBERSHIP_INDEX, ProjectMembership

__all__ = ["ACTIVE_MEMBERSHIP_INDEX", "ProjectMembership"]
