#!/usr/bin/env python3
"""
Incremental guidance for a principal that is still being typed.

An ARN is treated as a sequence of slots:

    arn : partition : service : region : account : resource

The slot being edited is derived from the number of ':' separators. Each slot
has two handlers: one for when the slot has just been opened (the input ends
with ':') and one for when the user is part way through its token. Handlers
return one Suggestion or None; None means "no opinion", and the caller falls
back to validate_principal() for a full verdict.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, TypedDict

from ..vocabulary import (
    AWS_ONLY_SERVICES,
    AWS_PARTITIONS,
    IPCLD_PARTITION,
    PRINCIPAL_SERVICES,
    TARGET_CLOUD,
)
from .principal import (
    ACCOUNT_ID_RE,
    SERVICE_PRINCIPAL_DOMAINS,
    SERVICE_PRINCIPAL_RE,
    validate_principal,
)


class SuggestionKind:
    HINT = "hint"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class Suggestion(TypedDict):
    kind: str  # one of SuggestionKind
    message: str


ARN_SLOTS: Tuple[str, ...] = ("partition", "service", "region", "account", "resource")
ACCOUNT_ID_LENGTH = 12

_DIGITS = re.compile(r"[0-9]+")
_IPCLD_RESOURCE_TYPES = ("user", "policy")
_IAM_RESOURCE_TYPES = ("user", "role", "group")
_IAM_RESOURCE_EXAMPLES = {
    "user": "`user/alice`, `user/developers/john`",
    "role": "`role/S3AccessRole`, `role/service-role/MyLambdaRole`",
    "group": "`group/Developers`, `group/Admins`",
}
_IPCLD_RESOURCE_EXAMPLES = {
    "user": "`user/alice` or `user/bob`",
    "policy": "`policy/MyBucketPolicy` or `policy/ReadOnlyAccess`",
}
_COMMON_SERVICE_PRINCIPALS = ("s3.amazonaws.com", "ec2.amazonaws.com")


def _hint(message: str) -> Suggestion:
    return Suggestion(kind=SuggestionKind.HINT, message=message)


def _warning(message: str) -> Suggestion:
    return Suggestion(kind=SuggestionKind.WARNING, message=message)


def _error(message: str) -> Suggestion:
    return Suggestion(kind=SuggestionKind.ERROR, message=message)


def _success(message: str) -> Suggestion:
    return Suggestion(kind=SuggestionKind.SUCCESS, message=message)


def _completes(token: str, *candidates: str) -> bool:
    """True if token is a prefix of any candidate."""
    return any(c.startswith(token) for c in candidates)


@dataclass(frozen=True)
class _ArnCursor:
    partition: str
    service: str
    account: str
    token: str  # text typed so far in the active slot

    @property
    def is_ipcld(self) -> bool:
        return self.partition == IPCLD_PARTITION


# --- partition ---

def _partition_opened(cur: _ArnCursor) -> Optional[Suggestion]:
    return _hint(f"Next: partition -> `arn:aws:` for AWS, `arn:ipcld:` for {TARGET_CLOUD}")


def _partition_typing(cur: _ArnCursor) -> Optional[Suggestion]:
    token = cur.token
    if token == IPCLD_PARTITION:
        return _hint(f"Good! {TARGET_CLOUD} ARN. Now add service: `arn:ipcld:iam:`")
    if _completes(token, IPCLD_PARTITION):
        return _hint(f"Continue: `ipcld` for {TARGET_CLOUD} or `aws` for AWS")
    if token in AWS_PARTITIONS:
        return _hint(f"Good! Now add colon and service: `arn:{token}:`")
    if _completes(token, *AWS_PARTITIONS):
        return _hint("Continue: `aws`, `aws-cn`, or `aws-us-gov`")
    return None


# --- service ---

def _service_opened(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _hint(f"Next: service -> `iam` ({TARGET_CLOUD} only supports IAM currently)")
    return _hint("Next: service -> `iam`, `s3`, or `sts` then `:`")


def _service_typing(cur: _ArnCursor) -> Optional[Suggestion]:
    service = cur.token
    if cur.is_ipcld:
        if service == "iam":
            return _hint("Good! Now add `:` then region (leave empty): `arn:ipcld:iam:`")
        if _completes(service, "iam"):
            return _hint("Continue: `iam`")
        return _error(f"{TARGET_CLOUD} only supports the `iam` service")
    if service in PRINCIPAL_SERVICES:
        return _hint(
            f"Good! Now add colon and region: `arn:{cur.partition}:{service}:` (usually empty for IAM/S3)"
        )
    if service in AWS_ONLY_SERVICES:
        return _warning(
            f"`{service}` is AWS-specific and not supported by {TARGET_CLOUD}. Use `iam`, `s3`, or `sts`"
        )
    if _completes(service, *PRINCIPAL_SERVICES):
        return _hint("Common services: `iam`, `s3`, `sts`")
    return None


# --- region ---

def _region_opened(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _hint(f"Next: region (leave empty for {TARGET_CLOUD}) -> `:` then canonical ID")
    return _hint("Next: region (usually empty for IAM/S3) -> `:` then account ID")


def _region_typing(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _hint(f"{TARGET_CLOUD} ARNs leave region empty. Add `:` for canonical ID")
    return _hint("Most IAM/S3 ARNs leave region empty. Add `:` for account ID")


# --- account / canonical id ---

def _account_opened(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _hint(f"Next: Your {TARGET_CLOUD} canonical ID (alphanumeric string) then `:`")
    return _hint("Next: 12-digit account ID -> `123456789012` then `:`")


def _account_progress(account: str) -> Suggestion:
    if not _DIGITS.fullmatch(account):
        return _error("Account ID must contain only digits")
    if len(account) < ACCOUNT_ID_LENGTH:
        remaining = ACCOUNT_ID_LENGTH - len(account)
        return _hint(f"Account ID: {len(account)}/12 digits ({remaining} more needed)")
    if len(account) > ACCOUNT_ID_LENGTH:
        return _error("Account ID must be exactly 12 digits")
    return _hint("Perfect! Now add `:` and resource (e.g., `user/username` or `root`)")


def _account_typing(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _hint("Continue entering canonical ID, then add `:` for resource")
    return _account_progress(cur.token)


# --- resource ---

def _resource_opened(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _hint("Next: resource -> Examples: `user/alice`, `user/bob`, `policy/MyBucketPolicy`")
    if cur.service == "iam":
        return _hint(
            "Next: resource -> Examples: `user/alice`, `role/S3AccessRole`, "
            "`group/Developers`, or `root`"
        )
    return _hint("Next: resource identifier")


def _ipcld_resource(cur: _ArnCursor) -> Optional[Suggestion]:
    resource = cur.token
    if "/" not in resource:
        if _completes(resource, *_IPCLD_RESOURCE_TYPES):
            return _hint("Continue typing: `user/alice`, `user/bob`, or `policy/MyBucketPolicy`")
        return None
    resource_type, name = resource.split("/")[:2]
    if resource_type in _IPCLD_RESOURCE_TYPES:
        if not name:
            return _hint(
                f"Add the {resource_type} name. Examples: {_IPCLD_RESOURCE_EXAMPLES[resource_type]}"
            )
        # Only a complete ARN earns a success; anything else goes to full validation
        if cur.service == "iam" and cur.account:
            return _success(f"Valid {TARGET_CLOUD} {resource_type} ARN")
        return None
    if _completes(resource_type, *_IPCLD_RESOURCE_TYPES):
        return _hint(f"{TARGET_CLOUD} supports: `user/` or `policy/`")
    return None


def _iam_resource(cur: _ArnCursor) -> Optional[Suggestion]:
    resource = cur.token
    account_ok = bool(ACCOUNT_ID_RE.fullmatch(cur.account))
    if resource == "root":
        if account_ok:
            return _success("Complete! This grants access to the entire AWS account")
        return None
    if "/" not in resource:
        if _completes(resource, *_IAM_RESOURCE_TYPES, "root"):
            return _hint(
                "Continue typing: `user/alice`, `role/S3AccessRole`, `group/Developers`, or `root`"
            )
        return None
    resource_type, name = resource.split("/")[:2]
    if resource_type in _IAM_RESOURCE_TYPES:
        if not name:
            return _hint(
                f"Add the {resource_type} name. Examples: {_IAM_RESOURCE_EXAMPLES[resource_type]}"
            )
        if account_ok:
            return _success(f"Valid IAM {resource_type} ARN")
        return None
    if _completes(resource_type, *_IAM_RESOURCE_TYPES):
        return _hint("Common types: `user/`, `role/`, `group/`")
    return None


def _resource_typing(cur: _ArnCursor) -> Optional[Suggestion]:
    if cur.is_ipcld:
        return _ipcld_resource(cur)
    if cur.service == "iam":
        return _iam_resource(cur)
    return None


_SlotHandler = Callable[[_ArnCursor], Optional[Suggestion]]

_SLOT_HANDLERS: Dict[str, Tuple[_SlotHandler, _SlotHandler]] = {
    "partition": (_partition_opened, _partition_typing),
    "service": (_service_opened, _service_typing),
    "region": (_region_opened, _region_typing),
    "account": (_account_opened, _account_typing),
    "resource": (_resource_opened, _resource_typing),
}


def _suggest_arn(principal: str) -> Optional[Suggestion]:
    parts = principal.split(":")
    if len(parts) == 1:
        return _hint("Continue typing: `arn:`")

    slot = ARN_SLOTS[min(len(parts) - 2, len(ARN_SLOTS) - 1)]
    token = ":".join(parts[5:]) if slot == "resource" else parts[-1]
    cursor = _ArnCursor(
        partition=parts[1],
        service=parts[2] if len(parts) > 2 else "",
        account=parts[4] if len(parts) > 4 else "",
        token=token,
    )
    opened, typing = _SLOT_HANDLERS[slot]
    suggestion = typing(cursor) if token else opened(cursor)
    # Slot handlers only see their own slot; success needs the whole ARN to pass
    if suggestion is not None and suggestion["kind"] == SuggestionKind.SUCCESS:
        if not validate_principal(principal)["is_valid"]:
            return None
    return suggestion


def _suggest_service_principal(principal: str) -> Optional[Suggestion]:
    if "." not in principal and "amazonaws" not in principal:
        return None
    if principal.endswith(SERVICE_PRINCIPAL_DOMAINS):
        if SERVICE_PRINCIPAL_RE.fullmatch(principal):
            return _success("Valid service principal")
        return None
    if _completes(principal, *_COMMON_SERVICE_PRINCIPALS):
        return _hint("Common: `s3.amazonaws.com`, `ec2.amazonaws.com`")
    if "amazonaws" in principal:
        return _hint("Service principal format: `service-name.amazonaws.com`")
    return None


def _suggest_account_id(principal: str) -> Optional[Suggestion]:
    if not _DIGITS.fullmatch(principal):
        return None
    if len(principal) == ACCOUNT_ID_LENGTH:
        return _warning(
            f"Valid account ID. Consider using full ARN: `arn:aws:iam::{principal}:root`"
        )
    return _account_progress(principal)


def suggest_principal(principal: str) -> Optional[Suggestion]:
    """Return the next-step suggestion for a partially typed principal, or None."""
    if not principal:
        return _hint(
            "Start typing: `*` for public, `arn:aws:iam::` for AWS IAM, "
            f"`arn:ipcld:iam::` for {TARGET_CLOUD}, or 64-char hex for canonical ID"
        )

    if principal.startswith("arn:") or "arn:".startswith(principal):
        suggestion = _suggest_arn(principal)
        if suggestion is not None:
            return suggestion

    suggestion = _suggest_service_principal(principal)
    if suggestion is not None:
        return suggestion

    if principal == "*":
        return _warning("Wildcard grants public access - ensure this is intentional")

    return _suggest_account_id(principal)
