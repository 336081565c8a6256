# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "team_requests_total",
    "Total HTTP requests to team service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "team_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "team_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
IDEAS_CREATED = Counter(
    "team_ideas_created_total",
    "Total ideas registered with the team service",
)
APPROACHES_SUBMITTED = Counter(
    "team_approaches_submitted_total",
    "Total approaches submitted by candidates",
)
APPROACH_TRANSITIONS = Counter(
    "team_approach_transitions_total",
    "Approach status transitions applied",
    ["from_status", "to_status"],
)
ROLE_CONFLICTS = Counter(
    "team_role_conflicts_total",
    "Role conflicts detected on selection",
    ["conflict_type"],
)
RESOLUTIONS_APPLIED = Counter(
    "team_resolutions_applied_total",
    "Conflict resolutions applied",
    ["strategy"],
)
MEMBERS_REMOVED = Counter(
    "team_members_removed_total",
    "Team members soft-removed, including cascaded subroles",
    ["reason"],
)
VERSION_CONFLICTS = Counter(
    "team_version_conflicts_total",
    "Aggregate saves rejected because of a stale version",
)
SUGGESTION_FALLBACKS = Counter(
    "team_suggestion_fallbacks_total",
    "Suggestion requests served from the static pattern table",
    ["reason"],
)
TEAMS_COMPLETED = Counter(
    "team_teams_completed_total",
    "Teams that reached completion for the first time",
)
CATALOG_ROLES = Gauge(
    "team_catalog_roles",
    "Number of role definitions in the catalog",
)
