"""Identify HTTP clients and count their visits."""
