"""Scanning, parsing, resolving and interpreting Sparkle source."""
