"""Command line entry points for photoshelf."""
