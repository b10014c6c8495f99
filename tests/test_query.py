import pytest

from core.errors import QueryConfigurationError
from core.query import QMARK, BoundQuery, expand_membership, rebind, resolve_membership

TEMPLATE = "SELECT entry_id, bust FROM bwh WHERE entry_id IN (?) ORDER BY entry_id"


def test_no_identifiers_selects_everything():
    q = resolve_membership(TEMPLATE, [])
    assert q == BoundQuery("SELECT entry_id, bust FROM bwh ORDER BY entry_id", ())


def test_single_identifier_uses_equality():
    q = resolve_membership(TEMPLATE, [5])
    assert q.sql == "SELECT entry_id, bust FROM bwh WHERE entry_id = $1 ORDER BY entry_id"
    assert q.args == (5,)
    assert " IN " not in q.sql


def test_many_identifiers_expand_and_renumber():
    q = resolve_membership(TEMPLATE, [1, 2, 3])
    assert q.sql == "SELECT entry_id, bust FROM bwh WHERE entry_id IN ($1, $2, $3) ORDER BY entry_id"
    assert q.args == (1, 2, 3)


@pytest.mark.parametrize("n", [2, 7, 40])
def test_parameter_count_matches_identifier_count(n):
    q = resolve_membership(TEMPLATE, list(range(n)))
    assert len(q.args) == n
    assert q.sql.count("$") == n
    assert f"${n}" in q.sql
    assert f"${n + 1}" not in q.sql


def test_qmark_dialect_keeps_markers():
    q = resolve_membership(TEMPLATE, [1, 2], style=QMARK)
    assert "entry_id IN (?, ?)" in q.sql


def test_delete_template_without_ordering():
    q = resolve_membership("DELETE FROM link WHERE id IN (?)", [7])
    assert q.sql == "DELETE FROM link WHERE id = $1"
    assert resolve_membership("DELETE FROM link WHERE id IN (?)", []).sql == "DELETE FROM link"


def test_rebind_numbers_left_to_right_from_start():
    assert rebind("UPDATE t SET a = ?, b = ? WHERE id = ?") == "UPDATE t SET a = $1, b = $2 WHERE id = $3"
    assert rebind("x = ? AND y = ?", start=4) == "x = $4 AND y = $5"


def test_rebind_rejects_unknown_style():
    with pytest.raises(QueryConfigurationError):
        rebind("SELECT 1", style="named")


@pytest.mark.parametrize(
    "template",
    [
        "SELECT id FROM link",
        "SELECT id FROM link WHERE id IN (?) OR entry_id IN (?)",
    ],
)
def test_template_needs_exactly_one_membership_predicate(template):
    with pytest.raises(QueryConfigurationError):
        resolve_membership(template, [1, 2])


def test_unfiltered_shape_needs_a_bare_predicate():
    template = "SELECT id FROM link WHERE nsfw = false AND id IN (?)"
    # Filtered shapes still work...
    assert resolve_membership(template, [3]).sql == "SELECT id FROM link WHERE nsfw = false AND id = $1"
    # ...but dropping the predicate would leave a dangling AND.
    with pytest.raises(QueryConfigurationError):
        resolve_membership(template, [])


def test_expand_membership_rejects_zero():
    with pytest.raises(QueryConfigurationError):
        expand_membership(TEMPLATE, 0)
