"""Manager Results — structured outcomes returned instead of raising.

Invariants:
    - Validation, authorization and not-found failures all surface as these values
    - ImageRemoval.deleted and ImageRemoval.not_deleted are always disjoint
    - ImageRemoval.deleted is empty whenever local_confirmed is False
    - UpdatedPost.success is False when ownership fails or the commit fails

Design Decisions:
    - Dataclasses, not pydantic: internal values, routes project them into schemas
    - remote_confirmed/local_confirmed flags make the two-phase deletion gap explicit
      instead of collapsing it into a single boolean (ADR: asset drift is observable)
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from circle.core.domain_types import ImageId

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """Success flag + human message + optional payload (join/leave)."""
    success: bool
    message: str
    data: T | None = None


@dataclass
class ImageRemoval:
    """Outcome of a remote-first, local-second image deletion."""
    deleted: list[ImageId] = field(default_factory=list)
    not_deleted: list[ImageId] = field(default_factory=list)
    remote_confirmed: bool = False
    local_confirmed: bool = False


@dataclass
class UpdatedPost:
    """Composite outcome of UpdateAll."""
    success: bool = False
    new_content: str | None = None
    added_images: list = field(default_factory=list)
    removed_images: list[ImageId] = field(default_factory=list)
    not_removed_images: list[ImageId] = field(default_factory=list)
