import pytest
import tempfile
from pathlib import Path
import shutil


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove BUCKET_POLICY_* settings and stop .env loading from leaking in."""
    for name in (
        "BUCKET_POLICY_SID_PREFIX",
        "BUCKET_POLICY_OUTPUT_DIR",
        "BUCKET_POLICY_LOG_LEVEL",
        "BUCKET_POLICY_CHECK_PRINCIPALS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("bucket_policy.config._DOTENV_LOADED", True)
    return monkeypatch


@pytest.fixture
def valid_policy():
    """Well-formed policy with bucket and object resources and a condition."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "AllowListAndRead",
                "Effect": "Allow",
                "Action": ["s3:ListBucket", "s3:GetObject"],
                "Resource": [
                    "arn:aws:s3:::test-bucket",
                    "arn:aws:s3:::test-bucket/*"
                ],
                "Condition": {
                    "StringLike": {"s3:prefix": ["a/*"]}
                }
            }
        ]
    }


@pytest.fixture
def statement_factory():
    """Build a minimal valid statement, overriding or removing keys."""
    def _make(**overrides):
        stmt = {
            "Effect": "Allow",
            "Action": "s3:GetObject",
            "Resource": "arn:aws:s3:::test-bucket/*",
        }
        for key, value in overrides.items():
            if value is None:
                stmt.pop(key, None)
            else:
                stmt[key] = value
        return stmt
    return _make


@pytest.fixture
def policy_factory(statement_factory):
    """Wrap one statement into a 2012-10-17 policy."""
    def _make(**overrides):
        return {"Version": "2012-10-17", "Statement": [statement_factory(**overrides)]}
    return _make
