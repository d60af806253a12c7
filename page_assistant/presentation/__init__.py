"""Presentation helpers for surfacing pipeline results to users."""
