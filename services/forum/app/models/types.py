"""Column types shared by the forum models.

PostgreSQL is the store of record. The SQLite variants only exist so the test
suite can build the schema in an in-memory database.
"""

from sqlalchemy import JSON, BigInteger, Integer, String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

# BIGINT identity keys; SQLite only autoincrements INTEGER PRIMARY KEY columns.
BigIntId = BigInteger().with_variant(Integer(), "sqlite")

JsonDocument = JSONB().with_variant(JSON(), "sqlite")

TextArray = ARRAY(String).with_variant(JSON(), "sqlite")
