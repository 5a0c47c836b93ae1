"""Hirely job marketplace backend."""
