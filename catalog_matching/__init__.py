"""Normalization and matching engine for procurement equipment descriptions."""
