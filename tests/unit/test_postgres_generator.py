"""
Unit tests for PostgresSQLGenerator
"""

from ddlforge.providers.base.statements import statement_texts

USERS_DDL = (
    'CREATE TABLE "users" (\n'
    '    "id" INTEGER NOT NULL,\n'
    '    "email" VARCHAR(255) NOT NULL,\n'
    '    "status" VARCHAR(8) NULL DEFAULT \'active\' CONSTRAINT "users_status_check" '
    "CHECK (\"status\" IN ('active', 'disabled')),\n"
    '    PRIMARY KEY ("id")\n'
    ")"
)


class TestCreateSchema:
    """Test generating a schema from an empty database"""

    def test_full_script(self, shop_schema, run_migration):
        _, fragments = run_migration(shop_schema, driver="postgres")

        assert fragments[3].text == 'SET search_path TO "shop";\n'
        assert statement_texts(fragments) == [
            "SET client_encoding TO 'UTF8'",
            USERS_DDL,
            'CREATE TABLE "orders" (\n'
            '    "id" INTEGER NOT NULL,\n'
            '    "user_id" INTEGER NOT NULL,\n'
            '    "total" NUMERIC(10, 2) NULL,\n'
            '    PRIMARY KEY ("id")\n'
            ")",
            'CREATE UNIQUE INDEX "ux_users_email" ON "users" ("email")',
            'ALTER TABLE "orders" ADD CONSTRAINT "fk_orders_user" FOREIGN KEY ("user_id") '
            'REFERENCES "users" ("id") ON DELETE CASCADE',
        ]

    def test_table_has_no_storage_options(self, shop_schema, run_migration):
        """Collations are not compared, so no charset clause is written"""
        _, fragments = run_migration(shop_schema, driver="postgres")

        assert "CHARSET" not in "".join(statement_texts(fragments))

    def test_create_table_parses(self, shop_schema, run_migration, assert_sql):
        _, fragments = run_migration(shop_schema, driver="postgres")

        for statement in statement_texts(fragments)[1:4]:
            assert_sql(statement, "postgres")


class TestAlterSchema:
    """Test changes against an existing PostgreSQL database"""

    def test_widen_column_keeps_type(self, migrate_shop, users_table_dict, orders_table_dict):
        users_table_dict["columns"][1]["length"] = 320

        assert migrate_shop(users_table_dict, orders_table_dict, driver="postgres") == [
            "SET client_encoding TO 'UTF8'",
            'ALTER TABLE "users" ALTER COLUMN "email" TYPE VARCHAR(320)',
        ]

    def test_type_change_uses_cast(self, migrate_shop, users_table_dict, orders_table_dict):
        orders_table_dict["columns"][1]["type"] = "bigint"

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == [
            'ALTER TABLE "orders" ALTER COLUMN "user_id" TYPE BIGINT USING "user_id"::BIGINT'
        ]

    def test_new_enum_value_replaces_check(
        self, migrate_shop, users_table_dict, orders_table_dict
    ):
        users_table_dict["columns"][2]["enumValues"] = ["active", "disabled", "banned"]

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == [
            'ALTER TABLE "users" DROP CONSTRAINT IF EXISTS "users_status_check"',
            'ALTER TABLE "users" ADD CONSTRAINT "users_status_check" '
            "CHECK (\"status\" IN ('active', 'disabled', 'banned'))",
        ]

    def test_longer_enum_value_widens_column(
        self, migrate_shop, users_table_dict, orders_table_dict
    ):
        users_table_dict["columns"][2]["enumValues"] = ["active", "disabled", "suspended"]

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == [
            'ALTER TABLE "users" DROP CONSTRAINT IF EXISTS "users_status_check"',
            'ALTER TABLE "users" ALTER COLUMN "status" TYPE VARCHAR(9)',
            'ALTER TABLE "users" ADD CONSTRAINT "users_status_check" '
            "CHECK (\"status\" IN ('active', 'disabled', 'suspended'))",
        ]

    def test_drop_not_null(self, migrate_shop, users_table_dict, orders_table_dict):
        users_table_dict["columns"][1]["nullable"] = True

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == ['ALTER TABLE "users" ALTER COLUMN "email" DROP NOT NULL']

    def test_set_not_null_and_default(self, migrate_shop, users_table_dict, orders_table_dict):
        orders_table_dict["columns"][2].update({"nullable": False, "default": "0"})

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == [
            'ALTER TABLE "orders" ALTER COLUMN "total" SET NOT NULL',
            'ALTER TABLE "orders" ALTER COLUMN "total" SET DEFAULT 0',
        ]

    def test_drop_default(self, migrate_shop, users_table_dict, orders_table_dict):
        del users_table_dict["columns"][2]["default"]

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == ['ALTER TABLE "users" ALTER COLUMN "status" DROP DEFAULT']

    def test_change_primary_key(self, migrate_shop, users_table_dict, orders_table_dict):
        orders_table_dict["primaryKey"] = ["id", "user_id"]

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == [
            'ALTER TABLE "orders" DROP CONSTRAINT "orders_pkey"',
            'ALTER TABLE "orders" ADD PRIMARY KEY ("id", "user_id")',
        ]

    def test_drop_index_and_foreign_key(self, migrate_shop, users_table_dict, orders_table_dict):
        del users_table_dict["indexes"]
        del orders_table_dict["foreignKeys"]

        statements = migrate_shop(users_table_dict, orders_table_dict, driver="postgres")

        assert statements[1:] == [
            'ALTER TABLE "orders" DROP CONSTRAINT "fk_orders_user"',
            'DROP INDEX "ux_users_email"',
        ]

    def test_column_collation_ignored(self, migrate_shop, users_table_dict, orders_table_dict):
        users_table_dict["columns"][1]["collation"] = "C"

        assert migrate_shop(users_table_dict, orders_table_dict, driver="postgres") == []
