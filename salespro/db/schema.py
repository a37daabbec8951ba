from __future__ import annotations

from dataclasses import dataclass, field

from salespro.constants import ATTENDANCE, CRM, SALES, SETTINGS, TARGETS

# Bumped whenever a table or column is added; stored in PRAGMA user_version.
SCHEMA_VERSION = 1

ALL_SCHEMAS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS sales (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        timestamp INTEGER NOT NULL,
        product_name TEXT NOT NULL,
        quantity INTEGER NOT NULL,
        price REAL NOT NULL,
        bill_image BLOB,
        bill_image_type TEXT,
        bill_id TEXT,
        bill_number TEXT,
        customer_number TEXT
    );
    """,

    """
    CREATE TABLE IF NOT EXISTS attendance (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        status TEXT NOT NULL,
        time_in TEXT,
        time_out TEXT,
        location TEXT
    );
    """,

    """
    CREATE TABLE IF NOT EXISTS targets (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        day_target REAL NOT NULL DEFAULT 0,
        day_achievement REAL NOT NULL DEFAULT 0,
        week_target REAL NOT NULL DEFAULT 0,
        week_achievement REAL NOT NULL DEFAULT 0,
        eol_target REAL NOT NULL DEFAULT 0,
        eol_achieve REAL NOT NULL DEFAULT 0
    );
    """,

    """
    CREATE TABLE IF NOT EXISTS crm (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        timestamp INTEGER NOT NULL,
        category TEXT NOT NULL,
        customer_name TEXT NOT NULL DEFAULT '',
        contact_number TEXT NOT NULL DEFAULT '',
        product TEXT NOT NULL DEFAULT '',
        message TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'Open'
    );
    """,

    """
    CREATE TABLE IF NOT EXISTS settings (
        id TEXT PRIMARY KEY,
        user_name TEXT NOT NULL DEFAULT '',
        emp_id TEXT NOT NULL DEFAULT '',
        store_name TEXT,
        store_location TEXT NOT NULL DEFAULT '',
        theme TEXT NOT NULL DEFAULT 'dark',
        brand_website TEXT NOT NULL DEFAULT '',
        demo_link TEXT NOT NULL DEFAULT '',
        toll_free TEXT NOT NULL DEFAULT '',
        ai_api_key TEXT NOT NULL DEFAULT '',
        is_logged_in INTEGER NOT NULL DEFAULT 0,
        brand_target REAL NOT NULL DEFAULT 500000,
        profile_photo TEXT,
        store_lat REAL,
        store_lng REAL
    );
    """,
]

INDEX_STATEMENTS: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(date);",
    "CREATE INDEX IF NOT EXISTS idx_attendance_date ON attendance(date);",
    "CREATE INDEX IF NOT EXISTS idx_targets_date ON targets(date);",
    "CREATE INDEX IF NOT EXISTS idx_crm_status ON crm(status);",
]


@dataclass(frozen=True)
class CollectionSpec:
    """
    Maps a logical collection onto its table.
    columns excludes the key column; indexes maps index name -> column.
    """
    name: str
    columns: tuple[str, ...]
    key: str = "id"
    auto_key: bool = True
    indexes: dict[str, str] = field(default_factory=dict)


COLLECTIONS: dict[str, CollectionSpec] = {
    SALES: CollectionSpec(
        SALES,
        (
            "date", "timestamp", "product_name", "quantity", "price",
            "bill_image", "bill_image_type", "bill_id", "bill_number", "customer_number",
        ),
        indexes={"by-date": "date"},
    ),
    ATTENDANCE: CollectionSpec(
        ATTENDANCE,
        ("date", "status", "time_in", "time_out", "location"),
        indexes={"by-date": "date"},
    ),
    TARGETS: CollectionSpec(
        TARGETS,
        (
            "date", "day_target", "day_achievement", "week_target",
            "week_achievement", "eol_target", "eol_achieve",
        ),
        indexes={"by-date": "date"},
    ),
    CRM: CollectionSpec(
        CRM,
        (
            "date", "timestamp", "category", "customer_name", "contact_number",
            "product", "message", "status",
        ),
        indexes={"by-status": "status"},
    ),
    SETTINGS: CollectionSpec(
        SETTINGS,
        (
            "user_name", "emp_id", "store_name", "store_location", "theme",
            "brand_website", "demo_link", "toll_free", "ai_api_key", "is_logged_in",
            "brand_target", "profile_photo", "store_lat", "store_lng",
        ),
        auto_key=False,
    ),
}
