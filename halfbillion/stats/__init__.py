from .client import StatsClient, parse_stats

__all__ = ['StatsClient', 'parse_stats']
