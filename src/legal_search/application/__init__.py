"""
Application layer.

- search: SearchAggregator (fan-out, settle-all join, merge, rank)
- status: StatusChecker (concurrent connection probes with TTL cache)
"""
