#!/usr/bin/env python3
"""
Journey Map Platform — Export CLI.

Commands:
    python scripts/export_journey_csv.py list --snapshot state.json
    python scripts/export_journey_csv.py csv <journey_id> --snapshot state.json [-o out.csv]
    python scripts/export_journey_csv.py health <client_id> --snapshot state.json

Without --snapshot the snapshot comes from the store configured for APP_ENV.
"""

import argparse
import json
import sys

sys.path.insert(0, ".")


def _load_state(args):
    from journeymap.services.snapshot_store import JsonFileSnapshotStore

    if args.snapshot:
        return JsonFileSnapshotStore(args.snapshot).load()

    from journeymap import create_app
    from journeymap.services.snapshot_store import get_snapshot_store

    app = create_app()
    with app.app_context():
        return get_snapshot_store(app).load()


def cmd_list(args):
    """List clients, Meta-Journeys and journeys in the snapshot."""
    from journeymap.services.health import client_health, journey_health

    state = _load_state(args)
    for client in state.clients:
        score = client_health(client.id, state)
        print(f"\n  {client.name}  [{client.id}]  health={score if score is not None else '—'}")
        for project in state.projects_for_client(client.id):
            print(f"    {project.name}")
            for journey in state.journeys_for_project(project.id):
                j_score = journey_health(journey.id, state)
                phases = len(state.phases_for_journey(journey.id))
                print(f"      {journey.id:<38} {journey.name:<30} "
                      f"{phases} phases  health={j_score if j_score is not None else '—'}")
    print()


def cmd_csv(args):
    """Write one journey map to a CSV file."""
    from journeymap.core.exceptions import NotFoundError
    from journeymap.services.export_service import build_csv, download_csv, export_filename
    from journeymap.services.journey_service import journey_export_inputs

    state = _load_state(args)
    try:
        journey, phases, opportunities = journey_export_inputs(state, args.journey_id)
    except NotFoundError as exc:
        print(f"  ❌ {exc}")
        sys.exit(1)

    text = build_csv(phases, journey, opportunities, state.jobs)
    path = download_csv(text, args.output or export_filename(journey, "csv"))
    print(f"  ✅ {journey.name}: {len(phases)} phases → {path}")


def cmd_health(args):
    """Print the client health report as JSON."""
    from journeymap.core.exceptions import NotFoundError
    from journeymap.services.health import compute_client_health

    state = _load_state(args)
    try:
        report = compute_client_health(args.client_id, state)
    except NotFoundError as exc:
        print(f"  ❌ {exc}")
        sys.exit(1)
    print(json.dumps(report, indent=2, ensure_ascii=False))


def main(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--snapshot", help="Path to an AppState JSON file")

    parser = argparse.ArgumentParser(description="Journey map export tools")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", parents=[common], help="List journeys with health")

    p_csv = sub.add_parser("csv", parents=[common], help="Export a journey map to CSV")
    p_csv.add_argument("journey_id")
    p_csv.add_argument("-o", "--output", help="Output file (default: <journey-name>.csv)")

    p_health = sub.add_parser("health", parents=[common], help="Client health report")
    p_health.add_argument("client_id")

    args = parser.parse_args(argv)
    {"list": cmd_list, "csv": cmd_csv, "health": cmd_health}[args.command](args)


if __name__ == "__main__":
    main()
