"""
Services layer - prioritization logic lives here, NOT in routes.

- metric_extraction.py: six normalized metrics per request
- priority_scoring.py: weighted composite score and tiers
- ranking.py: deterministic ordering and view filters
- capacity_projection.py: what-if backlog clearance
- prioritization_engine.py: facade holding the current weights
- repositories/: read-only access to requests and neighborhood risk

DESIGN PRINCIPLE:
- The engine READS request snapshots; it never creates or resolves requests
"""
