"""Diagnostics, sessions, the shell and the debug printer around the core pipeline."""
