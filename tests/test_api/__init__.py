"""test_api tests."""
