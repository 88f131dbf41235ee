"""Mailgun operations exposed as tools.

Entries are ``"METHOD /path"`` strings that must match a path and method in
the bundled OpenAPI document. Anything not listed here is never exposed.
"""

ENDPOINTS = (
    # Messages
    "POST /v3/{domain_name}/messages",
    # Domains
    "GET /v4/domains",
    "GET /v4/domains/{name}",
    "PUT /v4/domains/{name}/verify",
    "GET /v3/domains/{name}/sending_queues",
    # Webhooks
    "GET /v3/domains/{domain}/webhooks",
    "GET /v3/domains/{domain}/webhooks/{webhook_name}",
    "POST /v3/domains/{domain}/webhooks",
    # Events and stats
    "GET /v3/{domain_name}/events",
    "GET /v3/{domain}/stats/total",
    "GET /v3/{domain}/tags",
    "POST /v1/analytics/metrics",
    # Suppressions
    "GET /v3/{domainID}/bounces",
    "GET /v3/{domainID}/bounces/{address}",
    "GET /v3/{domainID}/unsubscribes",
    "GET /v3/{domainID}/complaints",
    # Templates
    "GET /v3/{domain_name}/templates",
    "POST /v3/{domain_name}/templates",
    # Routes
    "GET /v3/routes",
    "POST /v3/routes",
    # Mailing lists
    "GET /v3/lists/pages",
    "GET /v3/lists/{list_address}/members/pages",
    "POST /v3/lists/{list_address}/members",
    # IPs
    "GET /v3/ips",
)
