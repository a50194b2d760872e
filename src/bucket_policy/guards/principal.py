#!/usr/bin/env python3
"""
PrincipalValidator: full-grammar check of a principal identifier.

Accepted shapes, tried in this order (the first matching branch decides):
- "" (optional field) and "*" (public access, with a warning)
- 64-character lowercase hex canonical user id
- service principal, e.g. s3.amazonaws.com
- ARN, either Impossible Cloud (arn:ipcld:iam::CanonicalID:type/name)
  or AWS (arn:aws:service:region:account-id:resource)
- bare 12-digit account id
Everything else is rejected with one generic error.
"""
from __future__ import annotations

import re
from typing import List

from ..vocabulary import (
    AWS_ONLY_SERVICES,
    AWS_PARTITIONS,
    IAM_RESOURCE_TYPES,
    IPCLD_PARTITION,
    PRINCIPAL_SERVICES,
    TARGET_CLOUD,
)
from .verdict import ValidationVerdict, make_verdict

_CANONICAL_ID = re.compile(r"[a-f0-9]{64}")
SERVICE_PRINCIPAL_RE = re.compile(r"[a-z0-9-]+\.(amazonaws\.com|amazon\.com)")
_AWS_ARN = re.compile(r"arn:(aws|aws-cn|aws-us-gov):[a-z0-9-]+:[a-z0-9-]*:([0-9]{12}|):.+")
ACCOUNT_ID_RE = re.compile(r"[0-9]{12}")

SERVICE_PRINCIPAL_DOMAINS = (".amazonaws.com", ".amazon.com")


def is_service_principal_like(principal: str) -> bool:
    return any(d in principal for d in SERVICE_PRINCIPAL_DOMAINS)


def _check_ipcld_arn(parts: List[str], errors: List[str]) -> None:
    service = parts[2] if len(parts) > 2 else ""
    canonical_id = parts[4] if len(parts) > 4 else ""
    resource = ":".join(parts[5:])

    if service != "iam":
        errors.append(
            f"{TARGET_CLOUD} ARNs currently only support IAM service (arn:ipcld:iam::...)"
        )
    if not canonical_id:
        errors.append(
            f"{TARGET_CLOUD} ARN requires a canonical ID (arn:ipcld:iam::YourCanonicalID:...)"
        )
    if not resource:
        errors.append(
            f"{TARGET_CLOUD} ARN requires a resource (e.g., user/username, policy/policyname)"
        )
    elif "/" not in resource:
        errors.append(
            f"{TARGET_CLOUD} resource must include type/name (e.g., user/username, policy/policyname)"
        )


def _check_iam_arn(region: str, account_id: str, resource: str,
                   errors: List[str], warnings: List[str]) -> None:
    if not account_id:
        errors.append("IAM ARN requires a 12-digit account ID")
    elif not ACCOUNT_ID_RE.fullmatch(account_id):
        errors.append(f"Account ID must be exactly 12 digits, got: {account_id}")

    if not resource:
        errors.append("IAM ARN requires a resource (e.g., user/username, role/rolename, or root)")
    elif resource != "root":
        resource_type = resource.split("/")[0]
        if "/" not in resource:
            errors.append('IAM resource must be "root" or include type/name (e.g., user/username)')
        elif resource_type not in IAM_RESOURCE_TYPES:
            warnings.append(
                f'Resource type "{resource_type}" may not be valid. Common types: user, role, root'
            )

    if region:
        warnings.append("IAM ARNs typically do not specify a region")


def _check_aws_arn(principal: str, parts: List[str],
                   errors: List[str], warnings: List[str]) -> None:
    if not _AWS_ARN.fullmatch(principal):
        errors.append(
            "Invalid ARN format. Expected: arn:aws:service:region:account-id:resource "
            "or arn:ipcld:iam::CanonicalID:resource"
        )
        return

    partition, service, region, account_id = parts[1], parts[2], parts[3], parts[4]
    resource = ":".join(parts[5:])

    if partition not in AWS_PARTITIONS:
        errors.append(
            f'Invalid partition "{partition}". Must be: aws, aws-cn, aws-us-gov, or ipcld ({TARGET_CLOUD})'
        )

    if service in AWS_ONLY_SERVICES:
        warnings.append(
            f'Service "{service}" is AWS-specific and not supported by {TARGET_CLOUD}. '
            "Use iam, s3, or sts instead."
        )
    elif service not in PRINCIPAL_SERVICES:
        warnings.append(
            f'Service "{service}" is unusual for S3 bucket policies. Common services: iam, s3, sts'
        )

    if service == "iam":
        _check_iam_arn(region, account_id, resource, errors, warnings)

    if service == "s3":
        if account_id:
            warnings.append("S3 ARNs typically do not include account ID")
        if region:
            warnings.append("S3 ARNs typically do not specify a region")


def validate_principal(principal: str) -> ValidationVerdict:
    """Validate a trimmed principal string and return errors and warnings."""
    errors: List[str] = []
    warnings: List[str] = []

    if not principal:
        return make_verdict(errors)

    if principal == "*":
        warnings.append('Using "*" grants public access - ensure this is intentional for security')
        return make_verdict(errors, warnings)

    if _CANONICAL_ID.fullmatch(principal):
        warnings.append(f"Using canonical user ID - ensure this is an {TARGET_CLOUD} canonical ID")
        return make_verdict(errors, warnings)

    if is_service_principal_like(principal):
        if SERVICE_PRINCIPAL_RE.fullmatch(principal):
            warnings.append(
                f"AWS service principals (*.amazonaws.com) may not be supported by {TARGET_CLOUD}. "
                "Use IAM user/role ARNs instead."
            )
        else:
            errors.append("Service principal format should be: service-name.amazonaws.com")
        return make_verdict(errors, warnings)

    if principal.startswith("arn:"):
        parts = principal.split(":")
        if parts[1] == IPCLD_PARTITION:
            _check_ipcld_arn(parts, errors)
        else:
            _check_aws_arn(principal, parts, errors, warnings)
        return make_verdict(errors, warnings)

    if ACCOUNT_ID_RE.fullmatch(principal):
        warnings.append(
            "Using just an account ID. Consider using full ARN format: arn:aws:iam::123456789012:root"
        )
        return make_verdict(errors, warnings)

    errors.append(
        'Principal must be "*", a valid ARN (arn:aws:... or arn:ipcld:...), canonical user ID '
        "(64-char hex), service principal (service.amazonaws.com), or 12-digit account ID"
    )
    return make_verdict(errors, warnings)
