"""SQLite schema rules"""

from ddlforge.rules import SchemaRules


class SQLiteRules(SchemaRules):
    max_identifier_length = None
    compare_collations = False
