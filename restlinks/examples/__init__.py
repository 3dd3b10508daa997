"""Ready-made demo resources used by the CLI and the tests."""
