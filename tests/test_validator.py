import pytest

from sqlsynth.schema.model import SchemaModel
from sqlsynth.sql.validator import (
    IssueKind,
    ValidationIssue,
    extract_aliases,
    validate_references,
)


@pytest.fixture
def users_schema():
    return SchemaModel.from_mapping(
        {
            "users": [
                {"name": "id", "type": "integer", "nullable": False, "isPrimaryKey": True},
                {"name": "email", "type": "text", "nullable": False},
            ]
        }
    )


def test_misspelled_aliased_column_is_reported_once(users_schema):
    report = validate_references("SELECT u.id, u.emial FROM users u", users_schema)

    assert report.has_issues
    assert report.issues == (ValidationIssue(IssueKind.UNKNOWN_COLUMN, "users", "emial"),)
    assert report.issues[0].message == 'Column "emial" not found in table "users"'


def test_unaliased_query_is_not_checked(users_schema):
    report = validate_references("SELECT idd FROM users", users_schema)

    assert not report.has_issues
    assert report.issues == ()


def test_alias_for_unknown_table_reports_unknown_table(users_schema):
    report = validate_references("SELECT c.name FROM customers c", users_schema)

    assert [issue.kind for issue in report.issues] == [IssueKind.UNKNOWN_TABLE]
    assert report.issues[0].table_name == "customers"
    assert report.issues[0].message == 'Table "customers" not found in schema'


def test_join_aliases_are_checked(shop_schema):
    sql = (
        "SELECT u.email, o.total FROM users u "
        "JOIN orders AS o ON o.user_id = u.id WHERE o.totl > 10"
    )

    report = validate_references(sql, shop_schema)

    assert report.issues == (ValidationIssue(IssueKind.UNKNOWN_COLUMN, "orders", "totl"),)


def test_issues_follow_discovery_order(shop_schema):
    sql = "SELECT o.amount, u.zip FROM users u JOIN orders o ON o.user_id = u.id"

    report = validate_references(sql, shop_schema)

    assert [(i.table_name, i.column_name) for i in report.issues] == [
        ("users", "zip"),
        ("orders", "amount"),
    ]


def test_every_occurrence_is_reported(users_schema):
    report = validate_references(
        "SELECT u.name FROM users u ORDER BY u.name", users_schema
    )

    assert len(report.issues) == 2


def test_validation_is_idempotent(shop_schema):
    sql = "SELECT u.nope FROM users u JOIN orders o ON o.uid = u.id"

    assert validate_references(sql, shop_schema) == validate_references(sql, shop_schema)


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("SELECT * FROM users u", {"u": "users"}),
        ("select * from users as u", {"u": "users"}),
        ('SELECT * FROM "users" u', {"u": "users"}),
        ("SELECT * FROM public.users u", {"u": "users"}),
        ("SELECT * FROM users users", {}),
        ("SELECT id FROM users WHERE id = 1", {}),
        ("SELECT * FROM users JOIN orders o ON o.user_id = users.id", {"o": "orders"}),
        ("SELECT * FROM users\nLEFT JOIN orders o USING (id)", {"o": "orders"}),
        ("SELECT * FROM (SELECT 1) sub", {}),
    ],
)
def test_extract_aliases(sql, expected):
    assert extract_aliases(sql) == expected


def test_alias_match_requires_identifier_boundary(shop_schema):
    sql = "SELECT u.email, menu.price FROM users u, menu"

    assert not validate_references(sql, shop_schema).has_issues


def test_quoted_column_reference_is_checked(users_schema):
    report = validate_references('SELECT u."Email" FROM users u', users_schema)

    assert report.issues == (ValidationIssue(IssueKind.UNKNOWN_COLUMN, "users", "Email"),)


def test_quoted_alias_is_not_tracked(users_schema):
    sql = 'SELECT "u".emial FROM users "u"'

    assert extract_aliases(sql) == {}
    assert not validate_references(sql, users_schema).has_issues


def test_unexpected_input_degrades_to_empty_report(users_schema):
    report = validate_references(None, users_schema)

    assert not report.has_issues


def test_report_serializes(users_schema):
    payload = validate_references("SELECT u.emial FROM users u", users_schema).to_dict()

    assert payload["has_issues"] is True
    assert payload["issues"][0]["kind"] == "unknown_column"
    assert payload["issues"][0]["column"] == "emial"
