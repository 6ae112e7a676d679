"""DKG Testbed test suite."""
