#!/usr/bin/env python3
"""Preset policy selections for common bucket access patterns."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class PolicyTemplate:
    name: str
    effect: str
    actions: Tuple[str, ...]
    resource_path: str
    description: str


_TEMPLATES: Tuple[PolicyTemplate, ...] = (
    PolicyTemplate(
        name="publicRead",
        effect="Allow",
        actions=("s3:GetObject",),
        resource_path="*",
        description="Public read access for all objects",
    ),
    PolicyTemplate(
        name="privateReadWrite",
        effect="Allow",
        actions=("s3:GetObject", "s3:PutObject", "s3:DeleteObject", "s3:ListBucket"),
        resource_path="*",
        description="Private read/write access for specific IAM user",
    ),
    PolicyTemplate(
        name="crossAccount",
        effect="Allow",
        actions=("s3:GetObject", "s3:ListBucket"),
        resource_path="*",
        description="Cross-account access",
    ),
    PolicyTemplate(
        name="objectLockVersioning",
        effect="Allow",
        actions=(
            # read/write
            "s3:GetObject",
            "s3:PutObject",
            "s3:DeleteObject",
            "s3:ListBucket",
            "s3:GetObjectAttributes",
            # object lock
            "s3:GetObjectLockConfiguration",
            "s3:PutObjectLockConfiguration",
            "s3:BypassGovernanceRetention",
            # versioning
            "s3:GetBucketVersioning",
            "s3:PutBucketVersioning",
            "s3:ListBucketVersions",
            "s3:GetObjectVersion",
            "s3:DeleteObjectVersion",
            "s3:GetObjectVersionAttributes",
        ),
        resource_path="*",
        description="Enable object lock and versioning with read/write access",
    ),
)

TEMPLATES: Dict[str, PolicyTemplate] = {t.name: t for t in _TEMPLATES}


def get_template(name: str) -> PolicyTemplate:
    """Return the named template; KeyError lists the known names."""
    try:
        return TEMPLATES[name]
    except KeyError:
        raise KeyError(f"Unknown template {name!r}. Available: {', '.join(TEMPLATES)}") from None


def list_templates() -> List[PolicyTemplate]:
    return list(_TEMPLATES)
