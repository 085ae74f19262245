"""Category catalog synchronization.

Pulls the category tree from a catalog REST API, flattens every record into an
index-ready document, optionally enriches each node with its full record under
a shared request-rate ceiling, and writes the results to a cache sink.
"""

from .models import EnrichmentResult, SyncOptions, SyncSummary
from .synchronizer import CategorySynchronizer

__all__ = ["CategorySynchronizer", "EnrichmentResult", "SyncOptions", "SyncSummary"]
