"""Bakery stock reconciliation and inventory service."""
