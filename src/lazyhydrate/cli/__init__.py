"""Command-line tools for inspecting requirement strings."""
