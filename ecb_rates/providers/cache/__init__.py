from ecb_rates.providers.cache.bounded_cache import BoundedCache

__all__ = ["BoundedCache"]
