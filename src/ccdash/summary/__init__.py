"""ccdash summary — preview, cache, provider and the service that ties them together."""

from ccdash.summary.cache import SummaryCache
from ccdash.summary.config import SummaryConfig
from ccdash.summary.models import (
    Backend,
    CacheEntry,
    CacheLoad,
    CacheLoadStatus,
    CacheStats,
    Preview,
    ProviderStatus,
    SummaryResult,
)
from ccdash.summary.preview import generate_preview
from ccdash.summary.provider import ProviderError, SummaryProvider
from ccdash.summary.service import SummaryService, create_summary_service

__all__ = [
    "Backend",
    "CacheEntry",
    "CacheLoad",
    "CacheLoadStatus",
    "CacheStats",
    "Preview",
    "ProviderError",
    "ProviderStatus",
    "SummaryCache",
    "SummaryConfig",
    "SummaryProvider",
    "SummaryResult",
    "SummaryService",
    "create_summary_service",
    "generate_preview",
]
