"""Adapters connecting testbridge ports to the local machine."""
