"""
Integration tests for fetch-retry.

Run retrying_fetch end to end through httpx and real sockets:
- Local scripted HTTP server (socket timeouts, slow responses)
- Refused connections
"""
