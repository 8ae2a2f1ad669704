"""Kernel services: record store, collaborators, reference data, claim context."""
