"""Decides when a returning user should be asked for feedback."""
