"""
Unit tests for SchemaDiffer

Tests change detection and the ordering guarantees: foreign keys are dropped
before their endpoints, created after them, and creates come before alters
before drops.
"""

from ddlforge.db_types import DbType
from ddlforge.providers.base.changes import ChangeType
from ddlforge.providers.base.state_differ import SchemaDiffer
from ddlforge.providers.mysql import MySQLRules
from ddlforge.providers.sqlite import SQLiteRules
from ddlforge.snapshot.models import DataForeignKey, DataIndex
from tests.utils import column, snapshot, table

USER_FK = DataForeignKey(
    name="fk_orders_user",
    columns=("user_id",),
    referenced_table="users",
    referenced_columns=("id",),
)


def users():
    return table(
        "users",
        column("id", nullable=False),
        column("email", DbType.STRING, length=255),
        primary_key=("id",),
    )


def orders(*foreign_keys: DataForeignKey):
    return table(
        "orders",
        column("id", nullable=False),
        column("user_id"),
        primary_key=("id",),
        foreign_keys=foreign_keys,
    )


def diff(current, new, rules=None, no_constraints_or_indexes=False):
    return SchemaDiffer(current, new, rules, no_constraints_or_indexes).compute()


def types_of(difference):
    return [change.type for change in difference.changes]


def position(difference, change_type, table_name):
    for index, change in enumerate(difference.changes):
        if change.type == change_type and change.table == table_name:
            return index
    raise AssertionError(f"{change_type} on {table_name} not found")


class TestChangeDetection:
    """Test which changes are produced"""

    def test_identical_snapshots_have_no_changes(self):
        """Diffing a snapshot with itself yields nothing"""
        current = snapshot(users(), orders(USER_FK))

        difference = diff(current, current)

        assert difference.is_empty
        assert difference.changes == ()

    def test_new_table(self):
        difference = diff(snapshot(), snapshot(users()))

        assert types_of(difference) == [ChangeType.CREATE_TABLE]
        assert difference.changes[0].table_def == users()

    def test_dropped_table(self):
        difference = diff(snapshot(users()), snapshot())

        assert types_of(difference) == [ChangeType.DROP_TABLE]
        assert difference.changes[0].table == "users"

    def test_single_added_column(self):
        """One new column is exactly one ADD_COLUMN change"""
        current = snapshot(users(), orders())
        new = snapshot(
            users().model_copy(
                update={"columns": users().columns + (column("name", DbType.STRING, length=80),)}
            ),
            orders(),
        )

        difference = diff(current, new)

        assert types_of(difference) == [ChangeType.ADD_COLUMN]
        assert difference.changes[0].table == "users"
        assert difference.changes[0].column.name == "name"

    def test_added_and_dropped_columns(self):
        current = snapshot(table("t", column("a"), column("b")))
        new = snapshot(table("t", column("a"), column("c")))

        difference = diff(current, new)

        assert types_of(difference) == [ChangeType.ADD_COLUMN, ChangeType.DROP_COLUMN]
        assert difference.changes[0].column.name == "c"
        assert difference.changes[1].column.name == "b"

    def test_type_change_only(self):
        current = snapshot(table("t", column("name", DbType.STRING, length=50)))
        new = snapshot(table("t", column("name", DbType.STRING, length=100)))

        difference = diff(current, new)

        assert types_of(difference) == [ChangeType.ALTER_COLUMN_TYPE]
        assert difference.changes[0].old_column.length == 50
        assert difference.changes[0].column.length == 100

    def test_nullability_change_is_distinct_from_type_change(self):
        current = snapshot(table("t", column("a", nullable=True)))
        new = snapshot(table("t", column("a", nullable=False)))

        assert types_of(diff(current, new)) == [ChangeType.ALTER_COLUMN_NULL_DEFAULT]

    def test_default_change(self):
        current = snapshot(table("t", column("a")))
        new = snapshot(table("t", column("a", default="0")))

        assert types_of(diff(current, new)) == [ChangeType.ALTER_COLUMN_NULL_DEFAULT]

    def test_type_and_nullability_change_emit_both_in_order(self):
        current = snapshot(table("t", column("a", DbType.INT)))
        new = snapshot(table("t", column("a", DbType.BIG_INT, nullable=False)))

        assert types_of(diff(current, new)) == [
            ChangeType.ALTER_COLUMN_TYPE,
            ChangeType.ALTER_COLUMN_NULL_DEFAULT,
        ]

    def test_changed_index_is_dropped_and_re_added(self):
        old_index = DataIndex(name="ix", columns=("a",))
        new_index = DataIndex(name="ix", columns=("a", "b"))
        current = snapshot(table("t", column("a"), column("b"), indexes=(old_index,)))
        new = snapshot(table("t", column("a"), column("b"), indexes=(new_index,)))

        assert types_of(diff(current, new)) == [ChangeType.DROP_INDEX, ChangeType.ADD_INDEX]

    def test_primary_key_change_is_alter_table(self):
        current = snapshot(table("t", column("a", nullable=False), column("b", nullable=False)))
        new = snapshot(
            table("t", column("a", nullable=False), column("b", nullable=False), primary_key=("a",))
        )

        difference = diff(current, new)

        assert types_of(difference) == [ChangeType.ALTER_TABLE]
        assert difference.changes[0].table_def.primary_key == ("a",)
        assert difference.changes[0].old_table.primary_key == ()

    def test_renamed_foreign_key_with_same_structure_is_unchanged(self):
        """Keys are matched by structure; SQLite reports no names at all"""
        unnamed = USER_FK.model_copy(update={"name": None})
        current = snapshot(users(), orders(unnamed))
        new = snapshot(users(), orders(USER_FK))

        assert diff(current, new).is_empty

    def test_change_ids_are_unique(self):
        current = snapshot(users(), orders(USER_FK))
        new = snapshot(
            table("users", column("id", nullable=False), primary_key=("id",)),
            orders(USER_FK.model_copy(update={"on_delete": "CASCADE"})),
        )

        ids = [change.id for change in diff(current, new).changes]

        assert len(ids) == len(set(ids))


class TestOrdering:
    """Test dependency-driven ordering"""

    def test_foreign_key_dropped_before_both_tables(self):
        difference = diff(snapshot(users(), orders(USER_FK)), snapshot())

        drop_key = position(difference, ChangeType.DROP_FOREIGN_KEY, "orders")
        assert drop_key < position(difference, ChangeType.DROP_TABLE, "orders")
        assert drop_key < position(difference, ChangeType.DROP_TABLE, "users")

    def test_foreign_key_dropped_before_referenced_table(self):
        """Dropping the referenced table waits for the key on the surviving table"""
        difference = diff(snapshot(users(), orders(USER_FK)), snapshot(orders()))

        assert types_of(difference) == [ChangeType.DROP_FOREIGN_KEY, ChangeType.DROP_TABLE]
        assert difference.changes[1].table == "users"

    def test_foreign_key_added_after_both_tables_exist(self):
        """Schema order puts the referencing table first; the key still waits"""
        difference = diff(snapshot(), snapshot(orders(USER_FK), users()))

        add_key = position(difference, ChangeType.ADD_FOREIGN_KEY, "orders")
        assert add_key > position(difference, ChangeType.CREATE_TABLE, "orders")
        assert add_key > position(difference, ChangeType.CREATE_TABLE, "users")

    def test_foreign_key_added_after_its_column(self):
        bare_orders = table("orders", column("id", nullable=False), primary_key=("id",))
        current = snapshot(users(), bare_orders)
        new = snapshot(users(), orders(USER_FK))

        difference = diff(current, new)

        assert position(difference, ChangeType.ADD_COLUMN, "orders") < position(
            difference, ChangeType.ADD_FOREIGN_KEY, "orders"
        )

    def test_foreign_key_dropped_before_its_column(self):
        current = snapshot(users(), orders(USER_FK))
        new = snapshot(users(), table("orders", column("id", nullable=False), primary_key=("id",)))

        difference = diff(current, new)

        assert types_of(difference) == [ChangeType.DROP_FOREIGN_KEY, ChangeType.DROP_COLUMN]

    def test_index_dropped_before_its_column(self):
        index = DataIndex(name="ix", columns=("b",))
        current = snapshot(table("t", column("a"), column("b"), indexes=(index,)))
        new = snapshot(table("t", column("a")))

        assert types_of(diff(current, new)) == [ChangeType.DROP_INDEX, ChangeType.DROP_COLUMN]

    def test_creates_before_alters_before_drops(self):
        current = snapshot(table("old"), table("kept", column("a", DbType.INT)))
        new = snapshot(table("kept", column("a", DbType.BIG_INT)), table("fresh"))

        assert types_of(diff(current, new)) == [
            ChangeType.CREATE_TABLE,
            ChangeType.ALTER_COLUMN_TYPE,
            ChangeType.DROP_TABLE,
        ]

    def test_ordering_is_deterministic(self):
        current = snapshot(users(), orders(USER_FK))
        new = snapshot(orders(), table("audit"), users())

        assert diff(current, new).changes == diff(current, new).changes

    def test_dependency_graph_is_kept(self):
        differ = SchemaDiffer(snapshot(users(), orders(USER_FK)), snapshot())
        differ.compute()

        drop_users = "drop_table:users"
        dependencies = differ.dependency_graph.get_dependencies(drop_users)
        assert [edge.to_id for edge in dependencies] == ["drop_foreign_key:orders.fk_orders_user"]


class TestPolicies:
    """Test rules and the constraint/index policy"""

    def test_no_constraints_or_indexes_skips_keys_and_indexes(self):
        new = snapshot(
            users().model_copy(
                update={"indexes": (DataIndex(name="ix_email", columns=("email",)),)}
            ),
            orders(USER_FK),
        )

        difference = diff(snapshot(), new, no_constraints_or_indexes=True)

        assert types_of(difference) == [ChangeType.CREATE_TABLE, ChangeType.CREATE_TABLE]

    def test_added_foreign_key_only(self):
        difference = diff(snapshot(users(), orders()), snapshot(users(), orders(USER_FK)))

        assert types_of(difference) == [ChangeType.ADD_FOREIGN_KEY]
        assert difference.changes[0].table == "orders"
        assert difference.changes[0].foreign_key == USER_FK

    def test_no_constraints_or_indexes_ignores_added_keys(self):
        difference = diff(
            snapshot(users(), orders()),
            snapshot(users(), orders(USER_FK)),
            no_constraints_or_indexes=True,
        )

        assert difference.changes == ()

    def test_no_constraints_or_indexes_ignores_dropped_keys(self):
        difference = diff(
            snapshot(users(), orders(USER_FK)),
            snapshot(users(), orders()),
            no_constraints_or_indexes=True,
        )

        assert difference.is_empty

    def test_collation_change_detected_when_compared(self):
        current = snapshot(table("t", charset="utf8mb4", collation="utf8mb4_0900_ai_ci"))
        new = snapshot(table("t", charset="utf8mb4", collation="utf8mb4_bin"))

        assert types_of(diff(current, new, MySQLRules())) == [ChangeType.ALTER_TABLE]

    def test_collation_ignored_when_not_compared(self):
        current = snapshot(table("t", column("s", DbType.TEXT, collation="C")))
        new = snapshot(table("t", column("s", DbType.TEXT)))

        assert diff(current, new, SQLiteRules()).is_empty
