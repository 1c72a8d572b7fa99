"""HTTP application for the todoops service."""
