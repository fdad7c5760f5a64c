"""Shared helpers for tmpldeps."""
