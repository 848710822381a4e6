from .client import GoodreadsClient, GoodreadsError, RateLimitExceeded
from .parser import parse_shelf_xml

__all__ = ['GoodreadsClient', 'GoodreadsError', 'RateLimitExceeded', 'parse_shelf_xml']
