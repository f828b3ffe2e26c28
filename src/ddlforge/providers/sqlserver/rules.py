"""SQL Server schema rules"""

from ddlforge.rules import SchemaRules


class SQLServerRules(SchemaRules):
    max_identifier_length = 128
    compare_collations = False
