import pytest

from bucket_policy.guards.policy_validator import validate_policy


class TestRootStructure:
    """Version, Statement, Id and unknown root keys."""

    def test_valid_policy(self, valid_policy):
        result = validate_policy(valid_policy)
        assert result["is_valid"] is True
        assert result["errors"] == []
        assert result["warnings"] == []

    @pytest.mark.parametrize("document", [[], "policy", 42, None])
    def test_non_object_root(self, document):
        assert validate_policy(document)["errors"] == ["Policy must be a JSON object"]

    def test_missing_version(self, valid_policy):
        del valid_policy["Version"]
        assert "Missing required field: Version" in validate_policy(valid_policy)["errors"]

    def test_version_not_string(self, valid_policy):
        valid_policy["Version"] = 2012
        assert "Version must be a string" in validate_policy(valid_policy)["errors"]

    def test_unknown_version(self, valid_policy):
        valid_policy["Version"] = "2020-01-01"
        assert validate_policy(valid_policy)["errors"] == [
            'Invalid Version: "2020-01-01". Must be "2012-10-17" or "2008-10-17"'
        ]

    def test_legacy_version_is_deprecated(self, valid_policy):
        valid_policy["Version"] = "2008-10-17"
        result = validate_policy(valid_policy)
        assert result["is_valid"] is True
        assert result["warnings"] == ['Version "2008-10-17" is deprecated. Use "2012-10-17"']

    def test_missing_statement(self):
        result = validate_policy({"Version": "2012-10-17"})
        assert result["errors"] == ["Missing required field: Statement"]

    def test_statement_not_array(self, valid_policy):
        valid_policy["Statement"] = valid_policy["Statement"][0]
        assert validate_policy(valid_policy)["errors"] == ["Statement must be an array"]

    def test_empty_statement_array(self):
        result = validate_policy({"Version": "2012-10-17", "Statement": []})
        assert result["is_valid"] is False
        assert "Statement array cannot be empty" in result["errors"]

    def test_unknown_root_key_warns(self, valid_policy):
        valid_policy["Extra"] = True
        result = validate_policy(valid_policy)
        assert result["is_valid"] is True
        assert result["warnings"] == ['Unknown root-level field: "Extra"']

    def test_id(self, valid_policy):
        valid_policy["Id"] = "MyPolicy"
        assert validate_policy(valid_policy)["is_valid"] is True
        valid_policy["Id"] = 7
        assert validate_policy(valid_policy)["errors"] == ["Id field must be a string"]


class TestStatementFields:
    """Sid, Effect, Principal and unknown statement keys."""

    def test_statement_must_be_object(self):
        result = validate_policy({"Version": "2012-10-17", "Statement": ["nope"]})
        assert result["errors"] == ["Statement[0]: Must be an object"]

    @pytest.mark.parametrize("sid,message", [
        ("has space", "Statement[0]: Sid must contain only alphanumeric characters"),
        ("dash-ed", "Statement[0]: Sid must contain only alphanumeric characters"),
        (12, "Statement[0]: Sid must be a string"),
    ])
    def test_bad_sid(self, policy_factory, sid, message):
        assert validate_policy(policy_factory(Sid=sid))["errors"] == [message]

    def test_missing_effect(self, policy_factory):
        assert validate_policy(policy_factory(Effect=None))["errors"] == [
            'Statement[0]: Missing required field "Effect"'
        ]

    def test_bad_effect(self, policy_factory):
        assert validate_policy(policy_factory(Effect="allow"))["errors"] == [
            'Statement[0]: Effect must be "Allow" or "Deny", got "allow"'
        ]

    def test_deny_is_valid(self, policy_factory):
        assert validate_policy(policy_factory(Effect="Deny"))["is_valid"] is True

    def test_principal_is_ignored_with_warning(self, policy_factory):
        result = validate_policy(policy_factory(Principal="*"))
        assert result["is_valid"] is True
        assert result["errors"] == []
        assert result["warnings"] == [
            "Statement[0]: Principal field is not supported by Impossible Cloud and will be ignored"
        ]

    def test_not_principal_is_ignored_with_warning(self, policy_factory):
        result = validate_policy(policy_factory(NotPrincipal={"AWS": "arn:aws:iam::123456789012:root"}))
        assert result["is_valid"] is True
        assert len(result["warnings"]) == 1

    def test_unknown_statement_key_warns(self, policy_factory):
        result = validate_policy(policy_factory(Foo="bar"))
        assert result["is_valid"] is True
        assert result["warnings"] == ['Statement[0]: Unknown field "Foo"']

    def test_indices_follow_statement_position(self, statement_factory):
        policy = {
            "Version": "2012-10-17",
            "Statement": [statement_factory(), statement_factory(Effect="Maybe")],
        }
        assert validate_policy(policy)["errors"] == [
            'Statement[1]: Effect must be "Allow" or "Deny", got "Maybe"'
        ]


class TestActions:
    """Action / NotAction."""

    def test_action_and_not_action_conflict(self, policy_factory):
        result = validate_policy(policy_factory(NotAction="s3:PutObject"))
        assert result["is_valid"] is False
        assert 'Statement[0]: Cannot have both "Action" and "NotAction"' in result["errors"]

    def test_missing_action(self, policy_factory):
        assert validate_policy(policy_factory(Action=None))["errors"] == [
            'Statement[0]: Missing "Action" or "NotAction"'
        ]

    def test_not_action_alone_is_valid(self, policy_factory):
        assert validate_policy(policy_factory(Action=None, NotAction="s3:DeleteObject"))["is_valid"] is True

    def test_empty_action_list(self, policy_factory):
        assert validate_policy(policy_factory(Action=[]))["errors"] == ["Statement[0].Action: Cannot be empty"]

    def test_non_string_action(self, policy_factory):
        assert validate_policy(policy_factory(Action=["s3:GetObject", 5]))["errors"] == [
            "Statement[0].Action[1]: Must be a string"
        ]

    @pytest.mark.parametrize("action", ["GetObject", "*"])
    def test_action_without_service(self, policy_factory, action):
        assert validate_policy(policy_factory(Action=action))["errors"] == [
            f'Statement[0].Action[0]: Invalid format "{action}". Must be "service:action"'
        ]

    def test_non_s3_action_warns(self, policy_factory):
        result = validate_policy(policy_factory(Action="ec2:RunInstances"))
        assert result["is_valid"] is True
        assert result["warnings"] == ['Statement[0].Action[0]: "ec2:RunInstances" is not an S3 action']

    def test_unknown_s3_action_warns(self, policy_factory):
        result = validate_policy(policy_factory(Action="s3:GetEverything"))
        assert result["is_valid"] is True
        assert result["warnings"] == [
            'Statement[0].Action[0]: "s3:GetEverything" may not be a valid S3 action'
        ]

    @pytest.mark.parametrize("action", ["s3:*", "s3:Get*", "s3:PutObjectRetention"])
    def test_wildcards_and_catalog_actions(self, policy_factory, action):
        result = validate_policy(policy_factory(Action=action))
        assert result["errors"] == []
        assert result["warnings"] == []


class TestResources:
    """Resource / NotResource."""

    @pytest.mark.parametrize("resource", ["*", "arn:aws:s3:::test-bucket", "arn:aws:s3:::test-bucket/a/b.txt"])
    def test_valid_resources(self, policy_factory, resource):
        result = validate_policy(policy_factory(Resource=resource))
        assert result["errors"] == []
        assert result["warnings"] == []

    def test_resource_and_not_resource_conflict(self, policy_factory):
        result = validate_policy(policy_factory(NotResource="arn:aws:s3:::other/*"))
        assert 'Statement[0]: Cannot have both "Resource" and "NotResource"' in result["errors"]

    def test_missing_resource(self, policy_factory):
        assert validate_policy(policy_factory(Resource=None))["errors"] == [
            'Statement[0]: Missing "Resource" or "NotResource"'
        ]

    def test_not_s3_arn(self, policy_factory):
        assert validate_policy(policy_factory(Resource="arn:aws:ec2:::instance"))["errors"] == [
            'Statement[0].Resource[0]: Must be a valid S3 ARN (arn:aws:s3:::...) or "*"'
        ]

    def test_missing_bucket(self, policy_factory):
        result = validate_policy(policy_factory(Resource="arn:aws:s3:::"))
        assert result["errors"] == ["Statement[0].Resource[0]: Missing bucket name in ARN"]
        assert result["warnings"] == []

    def test_double_slash(self, policy_factory):
        assert validate_policy(policy_factory(Resource="arn:aws:s3:::bucket//key"))["errors"] == [
            "Statement[0].Resource[0]: Invalid path - contains double slashes"
        ]

    def test_long_bucket(self, policy_factory):
        result = validate_policy(policy_factory(Resource="arn:aws:s3:::" + "a" * 64))
        assert result["errors"] == ["Statement[0].Resource[0]: Bucket name too long (max 63 characters)"]

    def test_odd_bucket_name_only_warns(self, policy_factory):
        result = validate_policy(policy_factory(Resource="arn:aws:s3:::Bad_Bucket"))
        assert result["is_valid"] is True
        assert result["warnings"] == ["Statement[0].Resource[0]: Bucket name may not follow S3 naming rules"]

    def test_each_resource_is_checked(self, policy_factory):
        result = validate_policy(policy_factory(Resource=["arn:aws:s3:::ok", "bucket", 3]))
        assert result["errors"] == [
            'Statement[0].Resource[1]: Must be a valid S3 ARN (arn:aws:s3:::...) or "*"',
            "Statement[0].Resource[2]: Must be a string",
        ]


class TestConditions:
    """Condition operators."""

    @pytest.mark.parametrize("operator", [
        "StringLike",
        "StringEqualsIfExists",
        "IpAddress",
        "Bool",
        "Null",
        "ForAnyValue:StringEquals",
        "ForAllValues:StringLike",
    ])
    def test_known_operators(self, policy_factory, operator):
        result = validate_policy(policy_factory(Condition={operator: {"s3:prefix": "a/"}}))
        assert result["errors"] == []

    def test_unknown_operator(self, policy_factory):
        result = validate_policy(policy_factory(Condition={"BogusOperator": {"k": "v"}}))
        assert result["is_valid"] is False
        assert result["errors"] == ['Statement[0].Condition: Unknown condition operator "BogusOperator"']

    def test_set_prefix_does_not_hide_unknown_operator(self, policy_factory):
        result = validate_policy(policy_factory(Condition={"ForAnyValue:Bogus": {"k": "v"}}))
        assert result["errors"] == [
            'Statement[0].Condition: Unknown condition operator "ForAnyValue:Bogus"'
        ]

    def test_set_prefix_keeps_remaining_colons(self, policy_factory):
        """Only the set prefix is stripped; the rest must be a known operator as-is."""
        result = validate_policy(policy_factory(Condition={"ForAllValues:StringLike:x": {"k": "v"}}))
        assert result["errors"] == [
            'Statement[0].Condition: Unknown condition operator "ForAllValues:StringLike:x"'
        ]

    def test_condition_must_be_object(self, policy_factory):
        assert validate_policy(policy_factory(Condition=["StringLike"]))["errors"] == [
            "Statement[0].Condition: Must be an object"
        ]

    def test_operator_block_must_be_object(self, policy_factory):
        assert validate_policy(policy_factory(Condition={"StringLike": "a/*"}))["errors"] == [
            "Statement[0].Condition.StringLike: Must be an object"
        ]


class TestPrincipalChecks:
    """check_principals=True inspects Principal block shape."""

    def test_off_by_default(self, policy_factory):
        result = validate_policy(policy_factory(Principal={"Bogus": "x"}))
        assert result["is_valid"] is True

    def test_wildcard(self, policy_factory):
        result = validate_policy(policy_factory(Principal="*"), check_principals=True)
        assert result["is_valid"] is True
        assert len(result["warnings"]) == 2

    def test_string_principal(self, policy_factory):
        result = validate_policy(policy_factory(Principal="arn:aws:iam::123456789012:root"), check_principals=True)
        assert result["is_valid"] is False
        assert result["errors"][0].startswith('Statement[0].Principal: String principals other than "*"')

    def test_unknown_principal_type(self, policy_factory):
        result = validate_policy(policy_factory(Principal={"Bogus": "x"}), check_principals=True)
        assert result["errors"] == [
            'Statement[0].Principal: Unknown principal type "Bogus". '
            "Valid types: AWS, Service, Federated, CanonicalUser"
        ]

    def test_aws_arns(self, policy_factory):
        principal = {"AWS": ["arn:aws:iam::123456789012:root", "arn:aws:iam::123:root", "alice"]}
        result = validate_policy(policy_factory(Principal=principal), check_principals=True)
        assert result["errors"] == ['Statement[0].Principal.AWS[2]: Invalid ARN format "alice"']
        assert "Statement[0].Principal.AWS[1]: Account ID should be 12 digits" in result["warnings"]

    def test_service(self, policy_factory):
        principal = {"Service": ["s3.amazonaws.com", "example.com"]}
        result = validate_policy(policy_factory(Principal=principal), check_principals=True)
        assert result["is_valid"] is True
        assert (
            "Statement[0].Principal.Service[1]: Service principal should typically end with .amazonaws.com"
            in result["warnings"]
        )


class TestWholeDocument:
    """Cross-cutting behaviour."""

    def test_errors_accumulate_across_statements(self, statement_factory):
        policy = {
            "Version": "2012-10-17",
            "Statement": [statement_factory(Effect=None), statement_factory(Action=None)],
        }
        result = validate_policy(policy)
        assert len(result["errors"]) == 2

    def test_idempotent(self, valid_policy):
        assert validate_policy(valid_policy) == validate_policy(valid_policy)

    def test_input_not_mutated(self, valid_policy):
        import copy
        before = copy.deepcopy(valid_policy)
        validate_policy(valid_policy, check_principals=True)
        assert valid_policy == before
