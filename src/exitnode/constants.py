"""Centralized constants for all modules."""

# Provider
MULLVAD_SUFFIX = ".mullvad.ts.net."
MULLVAD_ADDON_NOTE = "Mullvad VPN add-on requires a subscription ($5/month per 5 devices)"

# Latency sentinel: "never measured" and "probe failed" share this value
UNMEASURED = 0.0

# Selection defaults
PROBE_TIMEOUT = 2.0  # seconds, per probe
TOP_REGIONS = 5
PER_REGION = 5
PROBE_CONCURRENCY = 1

# tailscaled LocalAPI
DEFAULT_SOCKET = "/var/run/tailscale/tailscaled.sock"
LOCALAPI_HOST = "local-tailscaled.sock"
LOCALAPI_BASE_URL = f"http://{LOCALAPI_HOST}"
LOCALAPI_STATUS = "/localapi/v0/status"
LOCALAPI_PING = "/localapi/v0/ping"
LOCALAPI_PREFS = "/localapi/v0/prefs"
PING_TYPE_DISCO = "disco"

# Substrings the daemon uses when refusing a prefs write
PERMISSION_DENIED_MARKERS = (
    "Access denied",
    "permission denied",
    "prefs write access denied",
)

EXIT_NODES_KB_URL = "https://tailscale.com/kb/1103/exit-nodes"
