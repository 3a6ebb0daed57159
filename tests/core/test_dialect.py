"""Tests for the dialect catalog."""

from __future__ import annotations

import pytest

from sqlspine.core.dialect import (
    DEFAULT_DESCRIPTORS,
    DialectCatalog,
    DialectDescriptor,
    Operation,
    QueryTemplate,
    default_catalog,
    get_dialect,
    register_dialect,
)
from sqlspine.core.errors import ErrorCategory, UnsupportedDialectError
from sqlspine.core.types import DatabaseType


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture(params=list(DatabaseType))
def descriptor(request: pytest.FixtureRequest) -> DialectDescriptor:
    """Parametric fixture: run each test against every dialect."""
    return get_dialect(request.param)


# =========================================================================
# Database type parsing
# =========================================================================


class TestDatabaseType:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("mysql", DatabaseType.MYSQL),
            ("mariadb", DatabaseType.MARIADB),
            ("postgres", DatabaseType.POSTGRESQL),
            ("postgresql", DatabaseType.POSTGRESQL),
            ("PG", DatabaseType.POSTGRESQL),
            ("sqlite3", DatabaseType.SQLITE),
            ("sqlite", DatabaseType.SQLITE),
            ("sqlserver", DatabaseType.SQLSERVER),
            ("mssql", DatabaseType.SQLSERVER),
            ("oracle", DatabaseType.ORACLE),
            ("cockroachdb", DatabaseType.COCKROACHDB),
            (" Cockroach ", DatabaseType.COCKROACHDB),
        ],
    )
    def test_parse(self, name: str, expected: DatabaseType) -> None:
        assert DatabaseType.parse(name) is expected

    def test_parse_enum_passthrough(self) -> None:
        assert DatabaseType.parse(DatabaseType.ORACLE) is DatabaseType.ORACLE

    def test_parse_unknown(self) -> None:
        with pytest.raises(UnsupportedDialectError) as exc_info:
            DatabaseType.parse("db2")
        assert exc_info.value.category == ErrorCategory.DIALECT
        assert exc_info.value.context.dialect == "db2"


# =========================================================================
# Quoting
# =========================================================================


class TestQuote:
    @pytest.mark.parametrize(
        "db_type, expected",
        [
            (DatabaseType.MYSQL, "`orders`"),
            (DatabaseType.MARIADB, "`orders`"),
            (DatabaseType.POSTGRESQL, '"orders"'),
            (DatabaseType.SQLITE, '"orders"'),
            (DatabaseType.SQLSERVER, '"orders"'),
            (DatabaseType.ORACLE, '"orders"'),
            (DatabaseType.COCKROACHDB, '"orders"'),
        ],
    )
    def test_quote_char(self, db_type: DatabaseType, expected: str) -> None:
        assert get_dialect(db_type).quote("orders") == expected

    def test_embedded_quote_doubled(self) -> None:
        assert get_dialect("postgres").quote('we"ird') == '"we""ird"'
        assert get_dialect("mysql").quote("we`ird") == "`we``ird`"

    def test_dashes_survive(self, descriptor: DialectDescriptor) -> None:
        quoted = descriptor.quote("orders-copy-abcde")
        assert "orders-copy-abcde" in quoted
        assert quoted[0] == quoted[-1] == descriptor.quote_char


# =========================================================================
# Placeholders
# =========================================================================


class TestPlaceholders:
    @pytest.mark.parametrize(
        "db_type, expected",
        [
            (DatabaseType.MYSQL, ["?", "?", "?"]),
            (DatabaseType.MARIADB, ["?", "?", "?"]),
            (DatabaseType.SQLITE, ["?", "?", "?"]),
            (DatabaseType.COCKROACHDB, ["?", "?", "?"]),
            (DatabaseType.POSTGRESQL, ["$1", "$2", "$3"]),
            (DatabaseType.SQLSERVER, ["@p1", "@p2", "@p3"]),
            (DatabaseType.ORACLE, [":1", ":2", ":3"]),
        ],
    )
    def test_sequence(self, db_type: DatabaseType, expected: list[str]) -> None:
        assert get_dialect(db_type).placeholders(3) == expected

    def test_start_offset(self) -> None:
        assert get_dialect("postgres").placeholders(2, start=2) == ["$2", "$3"]

    def test_zero_count(self, descriptor: DialectDescriptor) -> None:
        assert descriptor.placeholders(0) == []

    def test_position_must_be_positive(self, descriptor: DialectDescriptor) -> None:
        with pytest.raises(ValueError):
            descriptor.placeholder(0)

    def test_catalog_shortcut(self) -> None:
        assert default_catalog.placeholder("oracle", 4) == ":4"
        assert default_catalog.quote("mariadb", "t") == "`t`"


# =========================================================================
# Templates
# =========================================================================


class TestTemplates:
    def test_every_operation_present(self, descriptor: DialectDescriptor) -> None:
        for operation in Operation:
            assert isinstance(descriptor.template(operation), QueryTemplate)

    def test_render_binds_match_placeholders(self, descriptor: DialectDescriptor) -> None:
        for operation in Operation:
            plan = descriptor.render(operation, table="orders", source="orders", target="copy")
            assert "{" not in plan.sql.replace("{}", "")
            assert len(plan.args) == len(descriptor.template(operation).binds)
            assert plan.operation == operation.value

    def test_select_all_quotes_table(self) -> None:
        assert get_dialect("sqlite").render(Operation.SELECT_ALL, table="t").sql == 'SELECT * FROM "t"'
        assert get_dialect("mysql").render(Operation.SELECT_ALL, table="t").sql == "SELECT * FROM `t`"

    def test_cockroach_select_all_schema_qualified(self) -> None:
        sql = get_dialect("cockroachdb").render(Operation.SELECT_ALL, table="t").sql
        assert sql == 'SELECT * FROM "public"."t"'

    def test_sqlserver_select_all_dbo(self) -> None:
        sql = get_dialect("sqlserver").render(Operation.SELECT_ALL, table="t").sql
        assert sql == 'SELECT * FROM dbo."t"'

    def test_postgres_columns_bind_table_name(self) -> None:
        plan = get_dialect("postgres").render(Operation.LIST_COLUMNS, table="orders")
        assert "TABLE_NAME = $1" in plan.sql
        assert "TABLE_SCHEMA = 'public'" in plan.sql
        assert plan.args == ("orders",)

    def test_postgres_primary_keys_regclass_binds_quoted_name(self) -> None:
        plan = get_dialect("postgres").render(Operation.PRIMARY_KEYS, table="Orders")
        assert "$1::regclass" in plan.sql
        assert plan.args == ('"Orders"',)

    def test_mysql_scoped_to_current_database(self) -> None:
        plan = get_dialect("mysql").render(Operation.PRIMARY_KEYS, table="orders")
        assert "DATABASE()" in plan.sql
        assert "CONSTRAINT_NAME = 'PRIMARY'" in plan.sql
        assert plan.args == ("orders",)

    def test_sqlserver_rename_uses_sp_rename(self) -> None:
        plan = get_dialect("sqlserver").render(Operation.RENAME_TABLE, source="a", target="b")
        assert plan.sql == "EXEC sp_rename 'a', 'b'"

    def test_sqlserver_rename_escapes_literal(self) -> None:
        plan = get_dialect("sqlserver").render(Operation.RENAME_TABLE, source="o'brien", target="b")
        assert "'o''brien'" in plan.sql

    def test_mysql_rename(self) -> None:
        plan = get_dialect("mysql").render(Operation.RENAME_TABLE, source="a", target="b")
        assert plan.sql == "RENAME TABLE `a` TO `b`"

    def test_oracle_drop_tolerates_missing_table(self) -> None:
        sql = get_dialect("oracle").render(Operation.DROP_TABLE, table="orders").sql
        assert sql.startswith("BEGIN EXECUTE IMMEDIATE 'DROP TABLE \"orders\"'")
        assert "SQLCODE != -942" in sql

    def test_oracle_uses_user_scope(self) -> None:
        plan = get_dialect("oracle").render(Operation.LIST_COLUMNS, table="orders")
        assert "TABLE_NAME = :1" in plan.sql
        assert "OWNER = USER" in plan.sql
        assert plan.args == ("orders",)

    @pytest.mark.parametrize(
        "operation", [Operation.LIST_COLUMNS, Operation.COLUMN_TYPES, Operation.PRIMARY_KEYS]
    )
    def test_oracle_metadata_matches_quoted_identifier(self, operation: Operation) -> None:
        oracle = get_dialect("oracle")
        exists = oracle.render(Operation.TABLE_EXISTS, table="orders")
        metadata = oracle.render(operation, table="orders")
        assert exists.sql == 'SELECT 1 FROM "orders" WHERE 1 = 0'
        assert "UPPER" not in metadata.sql
        assert metadata.args == ("orders",)

    def test_oracle_drop_escapes_identifier(self) -> None:
        sql = get_dialect("oracle").render(Operation.DROP_TABLE, table="we\"i'rd").sql
        assert sql.startswith("BEGIN EXECUTE IMMEDIATE 'DROP TABLE \"we\"\"i''rd\"';")

    def test_table_exists_returns_no_rows(self, descriptor: DialectDescriptor) -> None:
        sql = descriptor.render(Operation.TABLE_EXISTS, table="orders").sql
        assert sql == f"SELECT 1 FROM {descriptor.quote('orders')} WHERE 1 = 0"

    def test_duplicate_create_per_dialect(self) -> None:
        def create(name: str) -> str:
            return get_dialect(name).render(
                Operation.DUPLICATE_CREATE, source="a", target="b"
            ).sql

        assert create("mysql") == "CREATE TABLE `b` LIKE `a`"
        assert create("postgres") == 'CREATE TABLE "b" (LIKE "a" INCLUDING ALL)'
        assert create("sqlserver") == 'SELECT * INTO "b" FROM "a" WHERE 1 = 0'
        assert create("sqlite") == 'CREATE TABLE "b" AS SELECT * FROM "a" WHERE 1 = 0'

    def test_templates_read_only(self, descriptor: DialectDescriptor) -> None:
        with pytest.raises(TypeError):
            descriptor.templates[Operation.SELECT_ALL] = QueryTemplate("SELECT 1")  # type: ignore[index]


# =========================================================================
# Catalog
# =========================================================================


class TestCatalog:
    def test_supports_all_dialects(self) -> None:
        assert default_catalog.supported() == list(DatabaseType)
        for db_type in DatabaseType:
            assert db_type in default_catalog

    def test_missing_descriptor(self) -> None:
        catalog = DialectCatalog({DatabaseType.SQLITE: DEFAULT_DESCRIPTORS[DatabaseType.SQLITE]})
        assert DatabaseType.ORACLE not in catalog
        with pytest.raises(UnsupportedDialectError) as exc_info:
            catalog.descriptor("oracle")
        assert exc_info.value.context.dialect == "oracle"

    def test_missing_template(self) -> None:
        bare = DialectDescriptor(DatabaseType.SQLITE, '"', lambda i: "?", {})
        catalog = default_catalog.with_descriptor(bare)
        with pytest.raises(UnsupportedDialectError) as exc_info:
            catalog.render("sqlite", Operation.LIST_TABLES)
        assert exc_info.value.context.operation == "list_tables"

    def test_with_descriptor_leaves_original_untouched(self) -> None:
        custom = DialectDescriptor(
            DatabaseType.POSTGRESQL,
            '"',
            lambda i: "%s",
            DEFAULT_DESCRIPTORS[DatabaseType.POSTGRESQL].templates,
        )
        catalog = default_catalog.with_descriptor(custom)
        assert catalog.placeholder("postgres", 1) == "%s"
        assert default_catalog.placeholder("postgres", 1) == "$1"

    def test_unknown_name(self) -> None:
        with pytest.raises(UnsupportedDialectError):
            get_dialect("informix")

    def test_register_dialect(self) -> None:
        original = DEFAULT_DESCRIPTORS[DatabaseType.POSTGRESQL]
        custom = DialectDescriptor(DatabaseType.POSTGRESQL, '"', lambda i: "%s", original.templates)
        try:
            register_dialect(custom)
            assert get_dialect("postgres").placeholders(2) == ["%s", "%s"]
        finally:
            register_dialect(original)
        assert get_dialect("postgres").placeholder(1) == "$1"
