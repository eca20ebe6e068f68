"""Weather record ingestion.

This module reads sensor CSV exports and normalizes each row into
measurement documents for the bulk loader.
"""
