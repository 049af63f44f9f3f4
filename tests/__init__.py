# BigVault Test Suite
"""
Unit, integration and invalid-input tests.

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
