"""
Database schema definitions for the familyalbum application.

The record store only accepts table and column names listed here.
"""

PHOTOS_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS photos (
    id VARCHAR PRIMARY KEY,
    user_id VARCHAR,
    title VARCHAR NOT NULL,
    description VARCHAR,
    event VARCHAR,
    location VARCHAR,
    file_url VARCHAR NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    date_taken DATE,
    is_favorite BOOLEAN NOT NULL DEFAULT FALSE,
    people VARCHAR[],
    tags VARCHAR[]
);
"""

COMMENTS_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS comments (
    id VARCHAR PRIMARY KEY,
    photo_id VARCHAR NOT NULL,
    author_name VARCHAR NOT NULL,
    content VARCHAR NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

# photos rows are updated (is_favorite), so only comments get a secondary index
COMMENTS_TABLE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_comments_photo_id ON comments(photo_id);",
]

TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "photos": (
        "id",
        "user_id",
        "title",
        "description",
        "event",
        "location",
        "file_url",
        "created_at",
        "date_taken",
        "is_favorite",
        "people",
        "tags",
    ),
    "comments": ("id", "photo_id", "author_name", "content", "created_at"),
}

ALL_SCHEMA_STATEMENTS = [PHOTOS_TABLE_SCHEMA, COMMENTS_TABLE_SCHEMA] + COMMENTS_TABLE_INDEXES


def get_schema_statements() -> list[str]:
    """
    Get all database schema creation statements.

    Returns:
        List of SQL statements to create tables and indexes
    """
    return ALL_SCHEMA_STATEMENTS


def get_table_columns(table: str) -> tuple[str, ...]:
    """
    Get the column names of a known table.

    Raises:
        KeyError: If the table is not part of the schema
    """
    return TABLE_COLUMNS[table]


def validate_schema_compatibility() -> bool:
    """
    Check that every column the models use appears in the CREATE statements.

    Returns:
        True if schema is compatible, False otherwise
    """
    statements = {"photos": PHOTOS_TABLE_SCHEMA.lower(), "comments": COMMENTS_TABLE_SCHEMA.lower()}

    for table, columns in TABLE_COLUMNS.items():
        for column in columns:
            if column not in statements[table]:
                return False

    return True
