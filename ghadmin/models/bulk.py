from __future__ import annotations

from pydantic import BaseModel, Field


class BulkItemResult(BaseModel):
    full_name: str
    ok: bool
    error: str | None = None


class BulkResult(BaseModel):
    items: list[BulkItemResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if not item.ok)

    def record(self, full_name: str, error: Exception | None = None) -> None:
        if error is None:
            self.items.append(BulkItemResult(full_name=full_name, ok=True))
        else:
            self.items.append(BulkItemResult(full_name=full_name, ok=False, error=str(error)))
