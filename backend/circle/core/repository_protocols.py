"""Boundary Protocols — contracts between core and the asset store shell.

Invariants:
    - Managers depend on AssetStore, never on the Cloudinary SDK directly
    - UploadResult.stored is the only signal that a remote object exists
    - DestroyResult.deleted and DestroyResult.not_deleted partition the requested public ids

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do network IO
    - UploadedFile mirrors the subset of starlette's UploadFile the shell reads
"""

from dataclasses import dataclass, field
from typing import Protocol, Sequence


UPLOAD_OK = "ok"


class UploadedFile(Protocol):
    """Structural contract for incoming multipart files."""
    filename: str | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class UploadResult:
    """One upload attempt: url/public_id are set only when status is ok."""
    url: str | None
    public_id: str | None
    status: str

    @property
    def stored(self) -> bool:
        return self.status == UPLOAD_OK and bool(self.url) and bool(self.public_id)


@dataclass
class DestroyResult:
    """Public ids the store confirmed gone vs. the ones it could not delete."""
    deleted: list[str] = field(default_factory=list)
    not_deleted: list[str] = field(default_factory=list)


class AssetStore(Protocol):
    """Contract for remote image hosting — implemented by infrastructure."""
    async def upload(
        self, file: UploadedFile, width: int, height: int,
    ) -> UploadResult: ...

    async def upload_many(
        self, files: Sequence[UploadedFile],
    ) -> list[UploadResult]: ...

    async def destroy(self, public_ids: Sequence[str]) -> DestroyResult: ...
