#!/usr/bin/env python3
"""
PolicyValidator: structural and vocabulary checks for a bucket policy document.

The document must already be parsed JSON (dict/list/str/...). Nothing here
raises on bad input; every problem becomes an entry in the verdict, and all
statements are walked in one pass so the caller can report everything at once.

Checks:
- root: Version, Statement, Id and unknown root keys
- statement: Sid, Effect, Action/NotAction, Resource/NotResource, Condition
- Principal/NotPrincipal are ignored by Impossible Cloud, so they only warn;
  with check_principals=True the principal block shape is inspected as well
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List

from ..vocabulary import (
    CONDITION_OPERATORS,
    EFFECTS,
    LEGACY_POLICY_VERSION,
    POLICY_VERSIONS,
    PRINCIPAL_TYPES,
    ROOT_FIELDS,
    S3_ACTIONS,
    S3_ARN_PREFIX,
    SET_OPERATOR_PREFIXES,
    STATEMENT_FIELDS,
    TARGET_CLOUD,
)
from .verdict import ValidationVerdict, make_verdict

logger = logging.getLogger(__name__)

_SID = re.compile(r"[a-zA-Z0-9]+")
_RESOURCE_BUCKET = re.compile(r"[a-z0-9][a-z0-9.-]*[a-z0-9]")
_ACCOUNT_ID = re.compile(r"[0-9]{12}")
MAX_BUCKET_LENGTH = 63


def _present(obj: Dict[str, Any], key: str) -> bool:
    return obj.get(key) is not None


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else [value]


def _validate_actions(actions: Any, prefix: str, errors: List[str], warnings: List[str]) -> None:
    action_list = _as_list(actions)
    if not action_list:
        errors.append(f"{prefix}: Cannot be empty")
        return

    for idx, action in enumerate(action_list):
        if not isinstance(action, str):
            errors.append(f"{prefix}[{idx}]: Must be a string")
            continue
        if ":" not in action:
            errors.append(f'{prefix}[{idx}]: Invalid format "{action}". Must be "service:action"')
            continue
        service, action_name = action.split(":")[:2]
        if service != "s3":
            warnings.append(f'{prefix}[{idx}]: "{action}" is not an S3 action')
        elif action_name != "*" and action not in S3_ACTIONS and "*" not in action_name:
            warnings.append(f'{prefix}[{idx}]: "{action}" may not be a valid S3 action')


def _validate_resources(resources: Any, prefix: str, errors: List[str], warnings: List[str]) -> None:
    resource_list = _as_list(resources)
    if not resource_list:
        errors.append(f"{prefix}: Cannot be empty")
        return

    for idx, resource in enumerate(resource_list):
        if not isinstance(resource, str):
            errors.append(f"{prefix}[{idx}]: Must be a string")
            continue
        if resource == "*":
            continue
        if not resource.startswith(S3_ARN_PREFIX):
            errors.append(f'{prefix}[{idx}]: Must be a valid S3 ARN (arn:aws:s3:::...) or "*"')
            continue

        bucket_part = resource[len(S3_ARN_PREFIX):]
        if not bucket_part:
            errors.append(f"{prefix}[{idx}]: Missing bucket name in ARN")
            continue
        if "//" in bucket_part:
            errors.append(f"{prefix}[{idx}]: Invalid path - contains double slashes")

        # Bucket-level ARN: lighter re-check of the naming rules, warning only
        if "/" not in bucket_part:
            if len(bucket_part) > MAX_BUCKET_LENGTH:
                errors.append(f"{prefix}[{idx}]: Bucket name too long (max 63 characters)")
            if not _RESOURCE_BUCKET.fullmatch(bucket_part):
                warnings.append(f"{prefix}[{idx}]: Bucket name may not follow S3 naming rules")


def _validate_condition(condition: Any, prefix: str, errors: List[str]) -> None:
    if not isinstance(condition, dict):
        errors.append(f"{prefix}: Must be an object")
        return

    for operator, block in condition.items():
        base_operator = operator
        if operator.startswith(SET_OPERATOR_PREFIXES):
            base_operator = operator.split(":", 1)[1]
        if base_operator not in CONDITION_OPERATORS:
            errors.append(f'{prefix}: Unknown condition operator "{operator}"')
        if not isinstance(block, dict):
            errors.append(f"{prefix}.{operator}: Must be an object")


def _validate_principal_block(principal: Any, prefix: str,
                              errors: List[str], warnings: List[str]) -> None:
    if principal == "*":
        warnings.append(f"{prefix}: Using wildcard (*) grants public access - ensure this is intentional")
        return
    if isinstance(principal, str):
        errors.append(f'{prefix}: String principals other than "*" are not valid. Use {{"AWS": "..."}} format')
        return
    if not isinstance(principal, dict):
        errors.append(f'{prefix}: Must be "*" or an object')
        return

    for key in principal:
        if key not in PRINCIPAL_TYPES:
            errors.append(
                f'{prefix}: Unknown principal type "{key}". Valid types: {", ".join(PRINCIPAL_TYPES)}'
            )

    if _present(principal, "AWS"):
        for idx, arn in enumerate(_as_list(principal["AWS"])):
            if arn == "*":
                warnings.append(f'{prefix}.AWS[{idx}]: Using "*" grants public access')
            elif not isinstance(arn, str):
                errors.append(f"{prefix}.AWS[{idx}]: Must be a string")
            elif not arn.startswith("arn:aws:iam::"):
                errors.append(f'{prefix}.AWS[{idx}]: Invalid ARN format "{arn}"')
            elif not _ACCOUNT_ID.fullmatch(arn[len("arn:aws:iam::"):].split(":")[0]):
                warnings.append(f"{prefix}.AWS[{idx}]: Account ID should be 12 digits")

    if _present(principal, "Service"):
        for idx, svc in enumerate(_as_list(principal["Service"])):
            if not isinstance(svc, str):
                errors.append(f"{prefix}.Service[{idx}]: Must be a string")
            elif ".amazonaws.com" not in svc:
                warnings.append(
                    f"{prefix}.Service[{idx}]: Service principal should typically end with .amazonaws.com"
                )


def _validate_statement(stmt: Any, idx: int, errors: List[str], warnings: List[str],
                        check_principals: bool) -> None:
    prefix = f"Statement[{idx}]"

    if not isinstance(stmt, dict):
        errors.append(f"{prefix}: Must be an object")
        return

    if "Sid" in stmt:
        sid = stmt["Sid"]
        if not isinstance(sid, str):
            errors.append(f"{prefix}: Sid must be a string")
        elif not _SID.fullmatch(sid):
            errors.append(f"{prefix}: Sid must contain only alphanumeric characters")

    effect = stmt.get("Effect")
    if effect is None or effect == "":
        errors.append(f'{prefix}: Missing required field "Effect"')
    elif effect not in EFFECTS:
        errors.append(f'{prefix}: Effect must be "Allow" or "Deny", got "{effect}"')

    for key in ("Principal", "NotPrincipal"):
        if _present(stmt, key):
            warnings.append(f"{prefix}: {key} field is not supported by {TARGET_CLOUD} and will be ignored")
            if check_principals:
                _validate_principal_block(stmt[key], f"{prefix}.{key}", errors, warnings)

    for key, negated in (("Action", "NotAction"), ("Resource", "NotResource")):
        has_key, has_negated = _present(stmt, key), _present(stmt, negated)
        if not has_key and not has_negated:
            errors.append(f'{prefix}: Missing "{key}" or "{negated}"')
        if has_key and has_negated:
            errors.append(f'{prefix}: Cannot have both "{key}" and "{negated}"')
        check = _validate_actions if key == "Action" else _validate_resources
        for field_name in (key, negated):
            if _present(stmt, field_name):
                check(stmt[field_name], f"{prefix}.{field_name}", errors, warnings)

    if _present(stmt, "Condition"):
        _validate_condition(stmt["Condition"], f"{prefix}.Condition", errors)

    for key in stmt:
        if key not in STATEMENT_FIELDS:
            warnings.append(f'{prefix}: Unknown field "{key}"')


def validate_policy(policy: Any, check_principals: bool = False) -> ValidationVerdict:
    """Validate a parsed policy document.

    Args:
        policy: Parsed JSON value; JSON syntax errors are the caller's concern
        check_principals: Also inspect Principal/NotPrincipal block shape

    Returns:
        ValidationVerdict with every error and warning found
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(policy, dict):
        errors.append("Policy must be a JSON object")
        return make_verdict(errors, warnings)

    version = policy.get("Version")
    if version is None or version == "":
        errors.append("Missing required field: Version")
    elif not isinstance(version, str):
        errors.append("Version must be a string")
    elif version not in POLICY_VERSIONS:
        errors.append(f'Invalid Version: "{version}". Must be "2012-10-17" or "2008-10-17"')
    elif version == LEGACY_POLICY_VERSION:
        warnings.append('Version "2008-10-17" is deprecated. Use "2012-10-17"')

    statements = policy.get("Statement")
    if statements is None:
        errors.append("Missing required field: Statement")
    elif not isinstance(statements, list):
        errors.append("Statement must be an array")
    elif not statements:
        errors.append("Statement array cannot be empty")
    else:
        for idx, stmt in enumerate(statements):
            _validate_statement(stmt, idx, errors, warnings, check_principals)

    for key in policy:
        if key not in ROOT_FIELDS:
            warnings.append(f'Unknown root-level field: "{key}"')

    if _present(policy, "Id") and not isinstance(policy["Id"], str):
        errors.append("Id field must be a string")

    logger.debug(f"Policy validation finished: {len(errors)} errors, {len(warnings)} warnings")
    return make_verdict(errors, warnings)
