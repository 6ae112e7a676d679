"""test_client tests."""
