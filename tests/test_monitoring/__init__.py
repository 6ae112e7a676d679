"""test_monitoring tests."""
