"""Internal constants shared across the library."""

USER_AGENT = "crowdsense/1"
DEFAULT_TABLE = "WhereTheCrowdAt"
REST_PREFIX = "/rest/v1"

# ------------------------------------------------------------------
# Scan policy
# ------------------------------------------------------------------

#: Events at or below this RSSI (dBm) are not admitted to a session.
RSSI_THRESHOLD = -70
#: Fixed collection window in seconds, measured from session open.
SCAN_DURATION_S = 2.0
#: Coordinate used when no location was ever acquired (Apple Park).
DEFAULT_LATITUDE = 37.3347
DEFAULT_LONGITUDE = -122.0090

# ------------------------------------------------------------------
# Reconciliation policy
# ------------------------------------------------------------------

#: Planar distance in raw degrees below which a newer record supersedes an older one.
SUPERSEDE_DISTANCE_DEG = 0.01
#: Records older than this are stale.
STALE_AFTER_S = 30 * 60
#: Janitor cadence.
SWEEP_INTERVAL_S = 60.0

# ------------------------------------------------------------------
# Estimation policy
# ------------------------------------------------------------------

#: Unnamed devices assumed per person.
DEVICES_PER_PERSON = 3
