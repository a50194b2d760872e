#!/usr/bin/env python3
"""
Static vocabularies shared by the validators and the generator.

Everything here is built once at import time and never mutated:
- S3 action catalog, grouped the way the policy form groups its checkboxes
- IAM condition operators accepted inside a statement's Condition block
- ARN grammar literals (partitions, services, IAM resource types)
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

POLICY_VERSION = "2012-10-17"
LEGACY_POLICY_VERSION = "2008-10-17"
POLICY_VERSIONS: FrozenSet[str] = frozenset({POLICY_VERSION, LEGACY_POLICY_VERSION})

EFFECTS: Tuple[str, ...] = ("Allow", "Deny")

S3_ARN_PREFIX = "arn:aws:s3:::"

# Impossible Cloud uses its own ARN partition for IAM identities
TARGET_CLOUD = "Impossible Cloud"
IPCLD_PARTITION = "ipcld"
AWS_PARTITIONS: Tuple[str, ...] = ("aws", "aws-cn", "aws-us-gov")

PRINCIPAL_SERVICES: Tuple[str, ...] = ("iam", "s3", "sts")
AWS_ONLY_SERVICES: FrozenSet[str] = frozenset({
    "ec2",
    "lambda",
    "cloudfront",
    "elasticloadbalancing",
    "rds",
    "dynamodb",
})

IAM_RESOURCE_TYPES: FrozenSet[str] = frozenset({
    "user",
    "role",
    "group",
    "instance-profile",
    "federated-user",
    "assumed-role",
})

PRINCIPAL_TYPES: Tuple[str, ...] = ("AWS", "Service", "Federated", "CanonicalUser")

ROOT_FIELDS: Tuple[str, ...] = ("Version", "Id", "Statement")
STATEMENT_FIELDS: Tuple[str, ...] = (
    "Sid",
    "Effect",
    "Principal",
    "NotPrincipal",
    "Action",
    "NotAction",
    "Resource",
    "NotResource",
    "Condition",
)

S3_ACTION_GROUPS: Dict[str, Tuple[str, ...]] = {
    "Object Operations": (
        "s3:GetObject",
        "s3:PutObject",
        "s3:DeleteObject",
        "s3:GetObjectAttributes",
        "s3:GetObjectAcl",
        "s3:PutObjectAcl",
        "s3:GetObjectTorrent",
        "s3:RestoreObject",
    ),
    "Bucket Operations": (
        "s3:ListBucket",
        "s3:GetBucketLocation",
        "s3:GetBucketAcl",
        "s3:PutBucketAcl",
        "s3:GetBucketLogging",
        "s3:PutBucketLogging",
        "s3:GetBucketNotification",
        "s3:PutBucketNotification",
        "s3:GetBucketRequestPayment",
        "s3:PutBucketRequestPayment",
        "s3:GetBucketWebsite",
        "s3:PutBucketWebsite",
        "s3:DeleteBucketWebsite",
        "s3:GetBucketPublicAccessBlock",
        "s3:PutBucketPublicAccessBlock",
    ),
    "Bucket Policy & CORS": (
        "s3:GetBucketPolicy",
        "s3:PutBucketPolicy",
        "s3:DeleteBucketPolicy",
        "s3:GetBucketCORS",
        "s3:PutBucketCORS",
        "s3:DeleteBucketCORS",
    ),
    "Object Versioning": (
        "s3:GetBucketVersioning",
        "s3:PutBucketVersioning",
        "s3:ListBucketVersions",
        "s3:GetObjectVersion",
        "s3:DeleteObjectVersion",
        "s3:GetObjectVersionAcl",
        "s3:PutObjectVersionAcl",
        "s3:GetObjectVersionAttributes",
        "s3:GetObjectVersionTorrent",
    ),
    "Object Lock & Retention": (
        "s3:GetBucketObjectLockConfiguration",
        "s3:PutBucketObjectLockConfiguration",
        "s3:GetObjectLockConfiguration",
        "s3:PutObjectLockConfiguration",
        "s3:GetObjectLegalHold",
        "s3:PutObjectLegalHold",
        "s3:GetObjectRetention",
        "s3:PutObjectRetention",
        "s3:BypassGovernanceRetention",
    ),
    "Tagging": (
        "s3:GetObjectTagging",
        "s3:PutObjectTagging",
        "s3:DeleteObjectTagging",
        "s3:GetObjectVersionTagging",
        "s3:PutObjectVersionTagging",
        "s3:DeleteObjectVersionTagging",
        "s3:GetBucketTagging",
        "s3:PutBucketTagging",
        "s3:DeleteBucketTagging",
    ),
    "Multipart Uploads": (
        "s3:ListBucketMultipartUploads",
        "s3:ListMultipartUploadParts",
        "s3:AbortMultipartUpload",
    ),
    "Replication & Encryption": (
        "s3:GetReplicationConfiguration",
        "s3:PutReplicationConfiguration",
        "s3:GetAccelerateConfiguration",
        "s3:PutAccelerateConfiguration",
        "s3:GetEncryptionConfiguration",
        "s3:PutEncryptionConfiguration",
    ),
}

S3_ACTIONS: FrozenSet[str] = frozenset(
    {"s3:*"} | {a for group in S3_ACTION_GROUPS.values() for a in group}
)


def _with_if_exists(*operators: str) -> Tuple[str, ...]:
    return operators + tuple(f"{op}IfExists" for op in operators)


CONDITION_OPERATORS: FrozenSet[str] = frozenset(
    _with_if_exists(
        "StringEquals",
        "StringNotEquals",
        "StringLike",
        "StringNotLike",
        "StringEqualsIgnoreCase",
        "StringNotEqualsIgnoreCase",
    )
    + _with_if_exists(
        "NumericEquals",
        "NumericNotEquals",
        "NumericLessThan",
        "NumericLessThanEquals",
        "NumericGreaterThan",
        "NumericGreaterThanEquals",
    )
    + _with_if_exists(
        "DateEquals",
        "DateNotEquals",
        "DateLessThan",
        "DateLessThanEquals",
        "DateGreaterThan",
        "DateGreaterThanEquals",
    )
    + _with_if_exists("Bool", "BinaryEquals")
    + _with_if_exists("IpAddress", "NotIpAddress")
    + _with_if_exists("ArnEquals", "ArnLike", "ArnNotEquals", "ArnNotLike")
    + ("Null",)
)

SET_OPERATOR_PREFIXES: Tuple[str, ...] = ("ForAllValues:", "ForAnyValue:")
