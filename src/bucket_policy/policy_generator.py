#!/usr/bin/env python3
"""
Bucket Policy Generator
Builds Impossible Cloud / S3 bucket policies from form selections and validates them
"""
from __future__ import annotations

import argparse
import itertools
import json
import logging
import os
import sys
import threading
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import DEFAULT_OUTPUT_DIR, DEFAULT_SID_PREFIX, Settings, load_settings
from .guards import (
    SuggestionKind,
    ValidationVerdict,
    suggest_principal,
    validate_bucket_name,
    validate_policy,
    validate_principal,
)
from .templates import get_template, list_templates
from .vocabulary import EFFECTS, POLICY_VERSION, S3_ACTION_GROUPS, S3_ARN_PREFIX

logger = logging.getLogger(__name__)

_SID_SEQUENCE = itertools.count(1)


class PolicyGenerationError(Exception):
    pass


class EmptyActionSet(PolicyGenerationError):
    def __init__(self) -> None:
        super().__init__("Please select at least one action")


class InvalidConditionJSON(PolicyGenerationError):
    def __init__(self, cause: ValueError) -> None:
        super().__init__(f"Invalid JSON in Condition field: {cause}")
        self.cause = cause


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def loads_strict(text: str) -> Any:
    """json.loads without the NaN/Infinity extensions; raises ValueError."""
    return json.loads(text, parse_constant=_reject_constant)


def next_sid(prefix: str = DEFAULT_SID_PREFIX) -> str:
    """Unique within the process: fixed-width epoch millis plus a sequence number."""
    return f"{prefix}{int(time.time() * 1000)}{next(_SID_SEQUENCE)}"


def merge_actions(selected: Iterable[str], additional_text: Optional[str] = None) -> List[str]:
    """Checked actions in order, then one free-text action per non-blank line."""
    actions = list(selected)
    if additional_text:
        for line in additional_text.split("\n"):
            action = line.strip()
            if action:
                actions.append(action)
    return actions


def _needs_bucket_resource(action: str) -> bool:
    return action == "s3:ListBucket" or action.startswith(("s3:GetBucket", "s3:PutBucket"))


def _collapse(values: List[str]) -> Any:
    return values[0] if len(values) == 1 else values


def build_resources(bucket_name: str, actions: Sequence[str], resource_path: str = "*") -> List[str]:
    resources: List[str] = []
    if any(_needs_bucket_resource(a) for a in actions):
        resources.append(f"{S3_ARN_PREFIX}{bucket_name}")
    if any("Object" in a for a in actions):
        resources.append(f"{S3_ARN_PREFIX}{bucket_name}/{resource_path}")
    if not resources:
        resources.append(f"{S3_ARN_PREFIX}{bucket_name}/*")
    return resources


def assemble_policy(bucket_name: str,
                    effect: str,
                    actions: Sequence[str],
                    resource_path: Optional[str] = "*",
                    condition_text: Optional[str] = None,
                    sid: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a single-statement bucket policy.

    The bucket name is not re-validated here; run validate_bucket_name first.
    Principal is never emitted since Impossible Cloud ignores it.

    Raises:
        EmptyActionSet: no actions were supplied
        InvalidConditionJSON: condition_text is not valid JSON
    """
    actions = list(actions)
    if not actions:
        raise EmptyActionSet()

    resource_path = (resource_path or "").strip() or "*"
    resources = build_resources(bucket_name, actions, resource_path)

    statement: Dict[str, Any] = {
        "Sid": sid or next_sid(),
        "Effect": effect,
        "Action": _collapse(actions),
        "Resource": _collapse(resources),
    }

    if condition_text and condition_text.strip():
        try:
            statement["Condition"] = loads_strict(condition_text)
        except ValueError as e:
            raise InvalidConditionJSON(e) from e

    return {"Version": POLICY_VERSION, "Statement": [statement]}


def save_policy(policy: Dict[str, Any], bucket_name: str, output_dir: Path) -> Path:
    """Write the policy to <output_dir>/<bucket>-policy.json and return the path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{(bucket_name or '').strip() or 'bucket'}-policy.json"
    if path.exists():
        logger.warning(f"Overwriting existing policy file: {path}")

    # Atomic write: write to temp then rename
    tmp_path = path.with_suffix(path.suffix + f".tmp.{os.getpid()}.{threading.get_ident()}.{time.time_ns()}")
    tmp_path.write_text(json.dumps(policy, indent=2) + "\n", encoding="utf-8")
    try:
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    return path


class BucketPolicyGenerator:
    """Generates bucket policies from user selections and validates them"""

    def __init__(self,
                 sid_prefix: str = DEFAULT_SID_PREFIX,
                 output_dir: Optional[Path] = None,
                 check_principals: bool = False):
        """
        Args:
            sid_prefix: Alphanumeric prefix for generated statement ids
            output_dir: Directory used by save_policy
            check_principals: Inspect Principal blocks when validating documents
        """
        self.sid_prefix = sid_prefix
        self.output_dir = Path(output_dir or DEFAULT_OUTPUT_DIR)
        self.check_principals = check_principals

    def generate_policy(self,
                        bucket_name: str,
                        effect: str = "Allow",
                        actions: Sequence[str] = (),
                        resource_path: Optional[str] = "*",
                        condition_text: Optional[str] = None) -> Dict[str, Any]:
        actions = list(actions)
        policy = assemble_policy(
            bucket_name,
            effect,
            actions,
            resource_path=resource_path,
            condition_text=condition_text,
            sid=next_sid(self.sid_prefix),
        )
        statement = policy["Statement"][0]
        logger.info(f"Generated {effect} policy for {bucket_name} with {len(actions)} action(s)")
        logger.debug(f"Resources: {statement['Resource']}")
        return policy

    def generate_from_template(self,
                               bucket_name: str,
                               template_name: str,
                               condition_text: Optional[str] = None) -> Dict[str, Any]:
        template = get_template(template_name)
        logger.info(f"Using template {template.name}: {template.description}")
        return self.generate_policy(
            bucket_name,
            effect=template.effect,
            actions=template.actions,
            resource_path=template.resource_path,
            condition_text=condition_text,
        )

    def validate_policy(self, policy: Any) -> ValidationVerdict:
        return validate_policy(policy, check_principals=self.check_principals)

    def save_policy(self, policy: Dict[str, Any], bucket_name: str) -> Path:
        path = save_policy(policy, bucket_name, self.output_dir)
        logger.info(f"Saved policy to: {path}")
        return path


# --- command line ---

_MARKERS = {
    SuggestionKind.HINT: "Hint",
    SuggestionKind.WARNING: "Warning",
    SuggestionKind.ERROR: "Error",
    SuggestionKind.SUCCESS: "OK",
}


def _print_verdict(title: str, verdict: ValidationVerdict, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(verdict, indent=2))
        return
    print(f"{title}: {'VALID' if verdict['is_valid'] else 'INVALID'}")
    for e in verdict["errors"]:
        print(f"  ✗ {e}")
    for w in verdict["warnings"]:
        print(f"  ⚠ {w}")


def _cmd_check_bucket(args: argparse.Namespace) -> int:
    bucket_name = args.name.strip()
    if not bucket_name:
        logger.error("Bucket name is required")
        return 1
    verdict = validate_bucket_name(bucket_name)
    _print_verdict("Bucket name", verdict, args.json)
    return 0 if verdict["is_valid"] else 1


def _cmd_check_principal(args: argparse.Namespace) -> int:
    principal = args.value.strip()
    suggestion = suggest_principal(principal)
    verdict = validate_principal(principal)
    if args.json:
        print(json.dumps({"suggestion": suggestion, "verdict": verdict}, indent=2))
    else:
        if suggestion is not None:
            print(f"{_MARKERS[suggestion['kind']]}: {suggestion['message']}")
        _print_verdict("Principal", verdict)
    return 0 if verdict["is_valid"] else 1


def _cmd_generate(args: argparse.Namespace, settings: Settings) -> int:
    bucket_name = args.bucket.strip()
    if not bucket_name:
        logger.error("Please enter a bucket name")
        return 1
    bucket_verdict = validate_bucket_name(bucket_name)
    if not bucket_verdict["is_valid"]:
        logger.error("Invalid bucket name. Please fix the errors below.")
        _print_verdict("Bucket name", bucket_verdict)
        return 1

    effect, resource_path, selected = "Allow", "*", list(args.action or [])
    if args.template:
        try:
            template = get_template(args.template)
        except KeyError as e:
            logger.error(e.args[0])
            return 1
        effect, resource_path = template.effect, template.resource_path
        selected = list(template.actions) + selected
    effect = args.effect or effect
    resource_path = args.resource_path if args.resource_path is not None else resource_path

    additional = Path(args.actions_file).read_text(encoding="utf-8") if args.actions_file else None
    actions = merge_actions(selected, additional)

    generator = BucketPolicyGenerator(
        sid_prefix=settings.sid_prefix,
        output_dir=args.output_dir or settings.output_dir,
        check_principals=settings.check_principals,
    )
    try:
        policy = generator.generate_policy(
            bucket_name,
            effect=effect,
            actions=actions,
            resource_path=resource_path,
            condition_text=args.condition,
        )
    except PolicyGenerationError as e:
        logger.error(f"Generation failed: {e}")
        return 1

    print(json.dumps(policy, indent=2))

    status = 0
    if args.validate:
        verdict = generator.validate_policy(policy)
        _print_verdict("Policy", verdict)
        if not verdict["is_valid"]:
            logger.warning(f"Policy validation failed: {verdict['errors']}")
            status = 1

    if args.save:
        generator.save_policy(policy, bucket_name)
    return status


def _cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    text = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    try:
        policy = loads_strict(text)
    except ValueError as e:
        logger.error(f"Invalid JSON syntax: {e}")
        return 1
    verdict = validate_policy(policy, check_principals=args.check_principals or settings.check_principals)
    _print_verdict("Policy", verdict, args.json)
    return 0 if verdict["is_valid"] else 1


def _cmd_templates(args: argparse.Namespace) -> int:
    for template in list_templates():
        print(f"{template.name}: {template.description}")
        print(f"  Effect: {template.effect} | Resource path: {template.resource_path}")
        print(f"  Actions: {', '.join(template.actions)}")
    return 0


def _cmd_actions(args: argparse.Namespace) -> int:
    for group, actions in S3_ACTION_GROUPS.items():
        print(group)
        for action in actions:
            print(f"  {action}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and validate S3-compatible bucket policies")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("check-bucket", help="Validate a bucket name")
    p.add_argument("name")
    p.add_argument("--json", action="store_true", help="Print the verdict as JSON")

    p = sub.add_parser("check-principal", help="Validate a principal and suggest the next token")
    p.add_argument("value")
    p.add_argument("--json", action="store_true", help="Print suggestion and verdict as JSON")

    p = sub.add_parser("generate", help="Generate a bucket policy")
    p.add_argument("--bucket", required=True, help="Bucket name")
    p.add_argument("--effect", choices=list(EFFECTS), help="Statement effect (default: Allow)")
    p.add_argument("--action", action="append", help="Action to include (repeatable)")
    p.add_argument("--actions-file", help="File with additional actions, one per line")
    p.add_argument("--resource-path", help="Object path inside the bucket (default: *)")
    p.add_argument("--condition", help="Condition block as JSON text")
    p.add_argument("--template", help="Start from a preset (see 'templates')")
    p.add_argument("--validate", action="store_true", help="Validate the generated policy")
    p.add_argument("--save", action="store_true", help="Save to <output-dir>/<bucket>-policy.json")
    p.add_argument("--output-dir", help="Directory for saved policies")

    p = sub.add_parser("validate", help="Validate a policy document")
    p.add_argument("file", help="Policy JSON file, or - for stdin")
    p.add_argument("--check-principals", action="store_true", help="Also check Principal blocks")
    p.add_argument("--json", action="store_true", help="Print the verdict as JSON")

    sub.add_parser("templates", help="List policy templates")
    sub.add_parser("actions", help="List known S3 actions by category")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")

    if args.command == "check-bucket":
        return _cmd_check_bucket(args)
    if args.command == "check-principal":
        return _cmd_check_principal(args)
    if args.command == "generate":
        return _cmd_generate(args, settings)
    if args.command == "validate":
        return _cmd_validate(args, settings)
    if args.command == "templates":
        return _cmd_templates(args)
    return _cmd_actions(args)


if __name__ == "__main__":
    sys.exit(main())
