"""
Page fetching and aggregation.

A fetcher returns one bounded page (or a `PageFailure`); the aggregator turns a
fetcher into the complete result set for a filter.
"""
