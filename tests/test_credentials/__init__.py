"""test_credentials tests."""
