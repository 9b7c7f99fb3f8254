from datetime import datetime, timedelta

# In-memory cache for presigned URLs, keyed by object key
_url_cache: dict[str, dict[str, str | datetime]] = {}

# Cached URLs are dropped this long before they actually expire
EXPIRY_BUFFER_SECONDS = 600

# Upper bound on cached URLs across all galleries
MAX_CACHED_URLS = 10_000


def _evict(now: datetime) -> None:
    """Drop expired entries, then the oldest ones while the cache is full."""
    expired = [key for key, cached in _url_cache.items() if cached["expires_at"] <= now]
    for key in expired:
        del _url_cache[key]

    # dicts keep insertion order, so the first keys are the oldest entries
    while len(_url_cache) >= MAX_CACHED_URLS:
        del _url_cache[next(iter(_url_cache))]


def cache_presigned_url(key: str, url: str, expires_in: int) -> None:
    """Cache a presigned URL with expiration time"""
    now = datetime.now()
    _url_cache.pop(key, None)
    if len(_url_cache) >= MAX_CACHED_URLS:
        _evict(now)

    buffer = min(EXPIRY_BUFFER_SECONDS, expires_in // 2)
    _url_cache[key] = {
        "url": url,
        "expires_at": now + timedelta(seconds=expires_in - buffer),
    }


def get_cached_presigned_url(key: str) -> str | None:
    """Get cached presigned URL if still valid"""
    cached = _url_cache.get(key)
    if cached:
        expires_at = cached["expires_at"]
        if isinstance(expires_at, datetime) and expires_at > datetime.now():
            url = cached["url"]
            return str(url) if isinstance(url, str) else None

    _url_cache.pop(key, None)
    return None


def clear_presigned_url_cache(key: str | None = None) -> None:
    """Clear the cached URL for ``key``, or the whole cache"""
    if key is None:
        _url_cache.clear()
    else:
        _url_cache.pop(key, None)
