"""
Test suite for the Configurator Draft Order Service.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_pricing.py -v
"""
