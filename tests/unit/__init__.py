"""
Unit tests for fetch-retry.

Test individual components in isolation:
- Policy resolution (defaults, environment, clamps, validation)
- Retry decisions and default predicates
- Per-attempt socket timeout
- Retry engine against scripted httpx.MockTransport handlers
- Transport, settings, logging and metrics
"""
