"""Command-line interface for templater."""
