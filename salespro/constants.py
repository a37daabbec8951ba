from __future__ import annotations

# COLLECTIONS (match table names)
SALES      = "sales"
ATTENDANCE = "attendance"
TARGETS    = "targets"
CRM        = "crm"
SETTINGS   = "settings"

# Order used for backup documents and destructive restore
ALL_COLLECTIONS: list[str] = [SALES, ATTENDANCE, TARGETS, CRM, SETTINGS]

# Fixed key of the settings singleton
SETTINGS_KEY = "user_settings"

# ── Attendance ────────────────────────────────────────────────────────────────
STATUS_PRESENT  = "Present"
STATUS_WEEK_OFF = "Week Off"
STATUS_LEAVE    = "Leave"

ATTENDANCE_STATUSES = [STATUS_PRESENT, STATUS_WEEK_OFF, STATUS_LEAVE]

# ── CRM ───────────────────────────────────────────────────────────────────────
CRM_INSTALLATION = "Installation"
CRM_COMPLAINT    = "Complaint"
CRM_STOCK_ISSUE  = "Stock Issue"

CRM_CATEGORIES = [CRM_INSTALLATION, CRM_COMPLAINT, CRM_STOCK_ISSUE]

CRM_OPEN   = "Open"
CRM_CLOSED = "Closed"

CRM_STATUSES = [CRM_OPEN, CRM_CLOSED]

# ── Settings defaults ─────────────────────────────────────────────────────────
THEME_DARK  = "dark"
THEME_LIGHT = "light"
THEMES = [THEME_DARK, THEME_LIGHT]

DEFAULT_BRAND_TARGET = 500000
AI_KEY_PREFIX = "AIza"

# ── Geofence ──────────────────────────────────────────────────────────────────
EARTH_RADIUS_M = 6_371_000
GEOFENCE_RADIUS_M = 300.0

# ── Backup transit fields (never stored on a live Sale) ───────────────────────
BACKUP_IMAGE_FIELD      = "billImageBase64"
BACKUP_IMAGE_TYPE_FIELD = "billImageType"
DEFAULT_IMAGE_MIME      = "image/jpeg"

# ── Product catalog (entry form search + bill scan matching) ──────────────────
PRODUCTS: list[str] = [
    "Bajaj Mixer Grinder Rex 500W",
    "Bajaj MG Bravo 750W",
    "Bajaj MG Platini PX7",
    "MR Tresta 1000W Mixer Grinder",
    "MR Tetragrind 500W Mixer Grinder",
    "MR Grindpro 750W Mixer Grinder",
    "Bajaj Storage Geyser 15L",
    "Bajaj Storage Geyser 25L",
    "Bajaj Water Heater Calenta 10L",
    "Bajaj Instant Geyser 3L",
    "Bajaj Instant Geyser 5L",
    "MR Air Fryer 4.5L",
    "MR OTG 60 RCSS",
    "MR OTG 29 RSS",
    "MR 20MWS Solo Microwave",
    "MR 20MS Grill Microwave",
    "Bajaj Steam Iron MX 35N",
    "Bajaj Dry Iron DX 6",
    "Bajaj Induction Cooktop ICX 7",
    "Bajaj Sandwich Maker SWX 4",
    "Bajaj Collar Kettle 1.5L",
]

# Product families for the shareable daily report.
# Order matters: it is the order of lines in the message.
PRODUCT_FAMILIES: list[tuple[str, list[str]]] = [
    ("Bajaj Mixer",      ["bajaj mixer", "bajaj mg"]),
    ("Morphy Mixer",     ["mr tresta", "mr tetragrind", "mr grindpro"]),
    ("Storage geyser",   ["storage geyser", "water heater"]),
    ("Instant geyser",   ["instant geyser"]),
    ("MR Air fryer",     ["air fryer"]),
    ("MR OTG 60ltr",     ["otg 60"]),
    ("MR OTG 29ltr",     ["otg 29"]),
    ("MR 20MWS",         ["20mws", "20ms"]),
    ("Bajaj steam iron", ["steam iron"]),
    ("Bajaj dry iron",   ["dry iron"]),
    ("Bajaj induction",  ["induction"]),
    ("Bajaj sandwich maker", ["sandwich maker"]),
    ("Bajaj collar",     ["collar"]),
]

# ── Messages ──────────────────────────────────────────────────────────────────
ERROR_MISSING_PRODUCT       = "Please select a product"
ERROR_INVALID_PRICE         = "Please enter a valid price greater than 0"
ERROR_INVALID_QUANTITY      = "Quantity must be at least 1"
ERROR_INVALID_PHONE         = "Phone number must be exactly 10 digits"
ERROR_INVALID_DATE          = "Date must be in YYYY-MM-DD format"
ERROR_PROFILE_INCOMPLETE    = "Please fill in all fields"
ERROR_INVALID_AI_KEY        = 'Invalid Gemini API Key format. It should start with "AIza".'
ERROR_STORE_NOT_MAPPED      = (
    "Store location not mapped! Please go to Settings and map your store location first."
)
ERROR_LOCATION_DENIED       = "Location permission denied. Please allow location access."
ERROR_LOCATION_UNAVAILABLE  = "Failed to get location. Please enable GPS."
ERROR_LOCATION_TIMEOUT      = "Timed out waiting for a location fix. Please try again."

ASSISTANT_UNAVAILABLE_MESSAGE = "Sorry, I encountered an error connecting to the server."
ASSISTANT_MISSING_KEY_MESSAGE = "Please configure your AI API Key in Settings first."

ASSISTANT_SALES_INSTRUCTION = (
    "You are a helpful sales assistant. Provide concise, practical advice."
)
ASSISTANT_SUPPORT_INSTRUCTION = (
    "You are a helpful customer support and troubleshooting assistant for home "
    "appliances (like mixers, geysers, irons). Provide concise, practical "
    "troubleshooting steps."
)
