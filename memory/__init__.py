"""Preference and outfit stores plus the rating feedback loop."""
