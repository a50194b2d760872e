from .arn_suggestion import Suggestion, SuggestionKind, suggest_principal
from .bucket_name import validate_bucket_name
from .policy_validator import validate_policy
from .principal import validate_principal
from .verdict import ValidationVerdict

__all__ = [
    "Suggestion",
    "SuggestionKind",
    "ValidationVerdict",
    "suggest_principal",
    "validate_bucket_name",
    "validate_policy",
    "validate_principal",
]
