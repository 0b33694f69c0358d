"""commander command-line interface."""
