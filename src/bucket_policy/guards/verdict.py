#!/usr/bin/env python3
from __future__ import annotations

from typing import List, Optional, TypedDict


class ValidationVerdict(TypedDict):
    is_valid: bool
    errors: List[str]  # block acceptance
    warnings: List[str]  # informational only


def make_verdict(errors: List[str], warnings: Optional[List[str]] = None) -> ValidationVerdict:
    return ValidationVerdict(is_valid=not errors, errors=list(errors), warnings=list(warnings or []))
