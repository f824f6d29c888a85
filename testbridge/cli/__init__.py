"""Command line interface for testbridge."""
