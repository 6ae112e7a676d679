"""test_session tests."""
