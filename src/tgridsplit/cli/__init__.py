"""Command-line interface for tgridsplit."""
