"""PostgreSQL schema rules"""

from ddlforge.rules import SchemaRules


class PostgresRules(SchemaRules):
    # NAMEDATALEN - 1
    max_identifier_length = 63
    compare_collations = False
