"""
Radar snapshot service test suite

Structure:
- unit/: unit tests for scanner, fetcher, decoder, projector, fallback, cache, service and HTTP layer
"""
