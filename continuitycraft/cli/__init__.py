"""Command line interface for ContinuityCraft."""
