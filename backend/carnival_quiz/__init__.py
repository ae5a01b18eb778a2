"""Carnival fitness quiz backend."""
