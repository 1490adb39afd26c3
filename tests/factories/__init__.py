"""Factory modules discovered by the loader tests."""
