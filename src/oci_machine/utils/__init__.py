"""Utility helpers for the OCI machine driver."""
