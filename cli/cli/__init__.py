"""schema-probe command-line interface."""
