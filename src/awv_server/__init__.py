"""awv_server — FastAPI REST API for conducting annual wellness visits.

Exposes the VisitEngine as a stateless HTTP API: template browsing, visit
management, section-by-section conduct and the personalised plan.
"""
