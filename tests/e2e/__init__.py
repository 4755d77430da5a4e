"""
E2E tests for the guided session engine.

These tests run whole sessions on the real asyncio clock and the JSON
profile store in a temporary directory. They sleep for short periods, so
they are kept apart from the unit suite.

Usage:
    pytest -m e2e tests/e2e/       # Run all E2E tests
    pytest -m "not e2e"            # Skip them
"""
