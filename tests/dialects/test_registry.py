"""Tests for dialect registration and product-name resolution."""

from __future__ import annotations

import pytest

from schemaspine.core.errors import ConfigError, UnsupportedDatabaseError
from schemaspine.dialects import (
    DialectRegistry,
    H2Dialect,
    MySQLDialect,
    OracleDialect,
    PostgreSQLDialect,
    SQLServerDialect,
    dialect_registry,
    get_dialect,
)


class TestResolve:
    @pytest.mark.parametrize(
        "product,dialect_type",
        [
            ("MySQL", MySQLDialect),
            ("MariaDB", MySQLDialect),
            ("PostgreSQL", PostgreSQLDialect),
            ("postgres", PostgreSQLDialect),
            ("Microsoft SQL Server", SQLServerDialect),
            ("mssql", SQLServerDialect),
            ("Oracle", OracleDialect),
            ("H2", H2Dialect),
        ],
    )
    def test_product_names(self, product: str, dialect_type: type) -> None:
        assert isinstance(get_dialect(product), dialect_type)

    def test_case_insensitive(self) -> None:
        assert isinstance(get_dialect("POSTGRESQL"), PostgreSQLDialect)

    def test_substring_match(self) -> None:
        assert isinstance(get_dialect("Oracle Database 19c Enterprise Edition"), OracleDialect)

    def test_resolution_is_cached(self) -> None:
        assert get_dialect("MySQL") is get_dialect("MySQL")

    @pytest.mark.parametrize("product", ["", "   ", "SQLite"])
    def test_unsupported(self, product: str) -> None:
        with pytest.raises(UnsupportedDatabaseError, match="Unsupported database"):
            get_dialect(product)

    def test_unsupported_is_config_error(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            get_dialect("DB2")
        assert "MySQL" in str(exc_info.value)


class TestRegistration:
    def test_defaults_in_registration_order(self) -> None:
        supported = DialectRegistry().list_supported()
        assert supported[:5] == ["MySQL", "PostgreSQL", "Microsoft SQL Server", "Oracle", "H2"]

    def test_is_supported(self) -> None:
        assert dialect_registry.is_supported("mariadb")
        assert not dialect_registry.is_supported("sqlite")

    def test_register_class_on_private_registry(self) -> None:
        class TiDBDialect(MySQLDialect):
            dialect_name = "tidb"

        registry = DialectRegistry()
        registry.register("TiDB", TiDBDialect)
        assert registry.resolve("TiDB").name == "tidb"
        assert not dialect_registry.is_supported("TiDB")

    def test_register_instance_replaces_cached(self) -> None:
        registry = DialectRegistry()
        original = registry.resolve("H2")
        replacement = H2Dialect()
        registry.register("H2", replacement)
        assert registry.resolve("H2") is replacement
        assert registry.resolve("H2") is not original
