"""Persistence wiring: engine, sessions, units of work and repositories."""
