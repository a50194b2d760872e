"""Bucket policy generator and validator for S3-compatible storage."""

__version__ = "0.1.0"
