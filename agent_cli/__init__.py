"""Command-line agent: extension discovery, activation and session commands."""
