"""Instrumentation and weather provider integrations."""
