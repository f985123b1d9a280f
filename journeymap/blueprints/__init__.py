"""
Journey Map Platform
Blueprint registry.

    journey_map_bp  — resolved rows and CSV / Excel downloads
    reporting_bp    — health reports (journey, Meta-Journey, client)
    snapshot_bp     — load / replace the stored AppState snapshot
"""
