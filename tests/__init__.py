"""Capacity Test Suite

This package contains all tests for the capacity signal analysis core.

Test organization:
- unit/: Unit tests for individual modules
  - absence/: Gap detection, coverage, and the 90-day gate
  - experiments/: Patterns, suggestions, experiment storage and analysis
  - test_store.py, test_config_models.py, test_language_filter.py, test_cli.py,
    test_logging_config.py

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/experiments/
"""
