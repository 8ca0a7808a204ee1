"""Expected-table registry validation."""

from __future__ import annotations

import pytest

from rada.db.base import Base
from rada.db.registry import EXPECTED_TABLES, ExpectedTable, RegistryError, validate_registry


class TestRegistry:
    """Test the registry and validate_registry."""

    def test_default_registry_is_valid(self):
        validate_registry(EXPECTED_TABLES)

    def test_registry_covers_every_model_table(self):
        assert {e.name for e in EXPECTED_TABLES} == set(Base.metadata.tables)

    def test_users_before_dependents(self):
        names = [e.name for e in EXPECTED_TABLES]
        assert names.index("users") < names.index("xp_transactions")
        assert names.index("users") < names.index("posts")
        assert names.index("posts") < names.index("post_likes")
        assert names.index("badges") < names.index("user_badges")

    def test_dependency_out_of_order_rejected(self):
        by_name = {e.name: e for e in EXPECTED_TABLES}
        bad = (by_name["xp_transactions"], by_name["users"])
        with pytest.raises(RegistryError, match="not registered before"):
            validate_registry(bad)

    def test_undeclared_foreign_key_rejected(self):
        by_name = {e.name: e for e in EXPECTED_TABLES}
        stripped = ExpectedTable("xp_transactions", by_name["xp_transactions"].table, ())
        with pytest.raises(RegistryError, match="undeclared"):
            validate_registry((by_name["users"], stripped))

    def test_duplicate_rejected(self):
        users = EXPECTED_TABLES[0]
        with pytest.raises(RegistryError, match="twice"):
            validate_registry((users, users))

    def test_name_mismatch_rejected(self):
        users = EXPECTED_TABLES[0]
        with pytest.raises(RegistryError, match="does not match"):
            validate_registry((ExpectedTable("members", users.table),))
