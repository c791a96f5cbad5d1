"""Data layer for a THORChain network dashboard."""
