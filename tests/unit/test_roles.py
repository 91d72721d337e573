"""
Unit tests for the role gate.
"""

import pytest

from quizbank.errors import RoleDeniedError
from quizbank.identity import Role, RolePolicy


class TestRolePolicy:
    """Tests for RolePolicy.select_role."""

    def test_student_always_allowed(self):
        assert RolePolicy(None).select_role(want_conductor=False) is Role.STUDENT
        assert RolePolicy("s3cret").select_role(want_conductor=False, secret="wrong") is Role.STUDENT

    @pytest.mark.parametrize("supplied", ["s3cret", "  s3cret  "])
    def test_conductor_with_matching_secret(self, supplied):
        assert RolePolicy("s3cret").select_role(True, supplied) is Role.CONDUCTOR

    @pytest.mark.parametrize("supplied", [None, "", "S3CRET", "s3cret!"])
    def test_conductor_with_wrong_secret(self, supplied):
        with pytest.raises(RoleDeniedError, match="Invalid secret phrase for Exam Conductor."):
            RolePolicy("s3cret").select_role(True, supplied)

    @pytest.mark.parametrize("configured", [None, "", "   "])
    def test_conductor_disabled_without_configured_secret(self, configured):
        policy = RolePolicy(configured)

        assert not policy.conductor_enabled
        with pytest.raises(RoleDeniedError):
            policy.select_role(True, "")
