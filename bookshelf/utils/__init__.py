from .rate_limit import RateLimiter, RetryPolicy

__all__ = ['RateLimiter', 'RetryPolicy']
