"""Scanning, analysis and cleaning pipeline."""
