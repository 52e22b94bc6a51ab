"""
Test suite for familyalbum application.

Unit tests for models, services, UI helpers and the ambient stack live
under tests/unit, laid out by package.
"""
