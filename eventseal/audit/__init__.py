"""Tamper-evident signing, storage, and verification of audit records."""
