"""Algorithms, signing keys and crypto backend setup."""
