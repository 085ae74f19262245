"""Run options and result types for category synchronization."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from catalog_sync.config import SyncConfig

CategoryNode = dict[str, Any]


class CategorySyncState(str, Enum):
    """Lifecycle of one root category within a sync run."""

    LISTED = "listed"
    SHALLOW = "shallow"
    EXTENDED = "extended"
    CACHED = "cached"
    EMITTED = "emitted"
    SKIPPED = "skipped"


class SyncOptions(BaseModel):
    """Per-run flags consumed at `sync()` call time."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    generate_unique_url_keys: bool = Field(
        default=True, description="Regenerate url_key as '<slug>-<id>' for every node"
    )
    extended_categories: bool = Field(
        default=False, description="Fetch and merge the full record of every node"
    )

    @classmethod
    def from_config(cls, config: SyncConfig) -> "SyncOptions":
        return cls(
            generate_unique_url_keys=config.generate_unique_url_keys,
            extended_categories=config.extended_categories,
        )


@dataclass
class EnrichmentResult:
    """Settled outcome of one per-node enrichment.

    Attributes:
        category_id: Id of the node that was enriched.
        ok: True when the fetched record was merged into the node.
        error: Failure description when `ok` is False.
    """

    category_id: Any
    ok: bool
    error: str | None = None


@dataclass
class SyncSummary:
    """Counters for a single `sync()` run."""

    listed: int = 0
    emitted: int = 0
    skipped: list[Any] = field(default_factory=list)
    enriched: list[Any] = field(default_factory=list)
    failed: list[Any] = field(default_factory=list)
    listing_failed: bool = False
    states: dict[Any, CategorySyncState] = field(default_factory=dict)

    def record(self, results: list[EnrichmentResult]) -> None:
        for result in results:
            if result.ok:
                self.enriched.append(result.category_id)
            else:
                self.failed.append(result.category_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "listed": self.listed,
            "emitted": self.emitted,
            "skipped": len(self.skipped),
            "enriched": len(self.enriched),
            "failed": len(self.failed),
            "listing_failed": self.listing_failed,
        }
