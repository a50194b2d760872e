#!/usr/bin/env python3
"""
Bucket name checks following the S3 naming rules.

Every rule is evaluated independently so a caller can show all problems at
once. The caller trims the input and handles the empty "required" case.
"""
from __future__ import annotations

import re
from typing import List

from .verdict import ValidationVerdict, make_verdict

MIN_BUCKET_LENGTH = 3
MAX_BUCKET_LENGTH = 63

_ALLOWED_CHARS = re.compile(r"[a-z0-9.-]+")
_EDGE_CHAR = re.compile(r"[a-z0-9]")
_IP_LITERAL = re.compile(r"(\d{1,3}\.){3}\d{1,3}")
_UPPERCASE = re.compile(r"[A-Z]")


def validate_bucket_name(bucket_name: str) -> ValidationVerdict:
    errors: List[str] = []

    if len(bucket_name) < MIN_BUCKET_LENGTH:
        errors.append("Bucket name must be at least 3 characters long")
    if len(bucket_name) > MAX_BUCKET_LENGTH:
        errors.append("Bucket name cannot exceed 63 characters")

    if not _ALLOWED_CHARS.fullmatch(bucket_name):
        errors.append(
            "Bucket name can only contain lowercase letters, numbers, dots (.), and hyphens (-)"
        )

    if not bucket_name or not _EDGE_CHAR.fullmatch(bucket_name[0]):
        errors.append("Bucket name must begin with a lowercase letter or number")
    if not bucket_name or not _EDGE_CHAR.fullmatch(bucket_name[-1]):
        errors.append("Bucket name must end with a lowercase letter or number")

    # Syntactic only: 999.999.999.999 is rejected too
    if _IP_LITERAL.fullmatch(bucket_name):
        errors.append("Bucket name cannot be formatted as an IP address (e.g., 192.168.1.1)")

    if bucket_name.startswith("xn--"):
        errors.append('Bucket name cannot start with "xn--"')
    if bucket_name.endswith("-s3alias"):
        errors.append('Bucket name cannot end with "-s3alias"')

    if ".." in bucket_name:
        errors.append("Bucket name cannot contain two adjacent periods (..)")
    if ".-" in bucket_name or "-." in bucket_name:
        errors.append("Bucket name cannot have a period adjacent to a hyphen")

    # Already covered by the charset rule, reported separately so the fix is obvious
    if _UPPERCASE.search(bucket_name):
        errors.append("Bucket name cannot contain uppercase letters")
    if "_" in bucket_name:
        errors.append("Bucket name cannot contain underscores (_)")

    return make_verdict(errors)
