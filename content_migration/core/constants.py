"""Application constants."""

import re

# Link schemes that never lead to a crawlable page
SKIPPED_LINK_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")

# Quote characters that only show up in hrefs produced by broken markup
MALFORMED_HREF_MARKERS = ('"', "'", "%22", "%27")

# Paths that are never content pages
SKIP_PATH_PATTERNS = [
    re.compile(r"/wp-admin", re.IGNORECASE),
    re.compile(r"/wp-login", re.IGNORECASE),
    re.compile(r"/wp-content/uploads", re.IGNORECASE),
    re.compile(r"\.(pdf|doc|docx|xls|xlsx|ppt|pptx|zip|rar|exe|dmg)$", re.IGNORECASE),
    re.compile(r"\.(jpg|jpeg|png|gif|svg|webp|ico)$", re.IGNORECASE),
    re.compile(r"\.(css|js|json|xml)$", re.IGNORECASE),
]

# Downloadable documents
DOCUMENT_EXTENSIONS = ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx")
DOCUMENT_HREF_PATTERN = re.compile(r"\.(" + "|".join(DOCUMENT_EXTENSIONS) + r")$", re.IGNORECASE)

# Video platforms
YOUTUBE_PATTERN = re.compile(
    r"(?:youtube\.com/embed/|youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})",
    re.IGNORECASE,
)
VIMEO_PATTERN = re.compile(r"vimeo\.com/(?:video/)?(\d+)", re.IGNORECASE)

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
YOUTUBE_EMBED_CODE = (
    '<iframe src="https://www.youtube.com/embed/{video_id}" frameborder="0" allowfullscreen></iframe>'
)
YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"
VIMEO_WATCH_URL = "https://vimeo.com/{video_id}"
VIMEO_EMBED_CODE = (
    '<iframe src="https://player.vimeo.com/video/{video_id}" frameborder="0" allowfullscreen></iframe>'
)

# Page type classification, first match wins:
# (page type, url path keywords, title keywords)
PAGE_TYPE_RULES = [
    ("about", ["/about"], ["about"]),
    ("team", ["/team"], ["team"]),
    ("services", ["/service"], ["service"]),
    ("blog", ["/blog", "/news", "/article"], []),
    ("contact", ["/contact"], ["contact"]),
    ("case-study", ["/case-stud"], ["case study"]),
    ("resources", ["/resource", "/download"], []),
    ("legal", ["/privacy", "/terms", "/legal"], []),
]

# Hero call-to-action anchors
CTA_CLASS_KEYWORDS = ("btn", "button", "cta")

# Fetch proxy
ACCEPTED_CONTENT_TYPES = ("text/html", "application/xhtml")
UPSTREAM_ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
UPSTREAM_ACCEPT_LANGUAGE = "en-US,en;q=0.5"

# Jobs API
MAX_LISTED_JOBS = 20

# Report
DEFAULT_LINK_TEXT = "Download"
UNKNOWN_FORMAT = "unknown"
HIGH_VALUE_PAGE_LIMIT = 10

# Migration priority per page type; unlisted types are archived
MIGRATION_PRIORITY_GROUPS = {
    "priority1": ("home", "contact", "services"),
    "priority2": ("about", "team", "case-study"),
    "priority3": ("blog", "resources"),
}

# Page types kept out of the primary navigation
NAVIGATION_EXCLUDED_TYPES = ("home", "other")

# Schemes a media URL can be fetched from, plus inline data
FETCHABLE_MEDIA_SCHEMES = ("http", "https", "data")
