"""
Validate a time-event catalogue YAML file.

Usage: python scripts/validate_events.py realmclock/events/catalogues/prophecy.yaml

Checks YAML syntax, the top-level layout, calendar levels and labels,
trigger modes and actions, and reports duplicate ids.
"""

import sys
from collections import Counter
from pathlib import Path

import yaml

from realmclock.core.calendar import LEVELS
from realmclock.events.loader import CatalogueError, parse_definition


def validate(catalogue_path: str) -> bool:
    """Validate catalogue and print results. Returns True if valid."""
    print(f"Validating: {catalogue_path}\n")

    path = Path(catalogue_path)
    if not path.exists():
        print(f"  ✗ File not found: {catalogue_path}")
        print("\nFAIL — File not found")
        return False

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
        print("  ✓ YAML syntax valid")
    except yaml.YAMLError as e:
        print(f"  ✗ YAML syntax error: {e}")
        print("\nFAIL — YAML parse error")
        return False

    if not isinstance(raw, dict) or not isinstance(raw.get("events"), list):
        print("  ✗ Missing top-level 'events' list")
        print("\nFAIL — 1 error found")
        return False

    entries = raw["events"]
    errors = []
    definitions = []
    for i, entry in enumerate(entries):
        try:
            definitions.append(parse_definition(entry))
        except CatalogueError as e:
            errors.append(f"Entry {i}: {e}")

    if not errors:
        print(f"  ✓ {len(entries)} events, all levels, labels, triggers and actions valid")
    else:
        for err in errors:
            print(f"  ✗ {err}")

    # Duplicate ids are allowed (both fire) but usually a copy-paste mistake
    duplicates = [eid for eid, n in Counter(d.id for d in definitions).items() if n > 1]
    for eid in duplicates:
        print(f"  ⚠ Event id '{eid}' appears more than once; every copy will fire")

    for d in definitions:
        levels = ", ".join(level for level in LEVELS if level in d.when)
        print(f"    - {d.id} [{d.trigger.value}] on {levels} ({len(d.actions)} actions)")

    if not errors:
        print("\nPASS — Catalogue is valid")
        return True
    print(f"\nFAIL — {len(errors)} error(s) found")
    return False


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/validate_events.py <catalogue.yaml>")
        sys.exit(1)

    valid = validate(sys.argv[1])
    sys.exit(0 if valid else 1)


if __name__ == "__main__":
    main()
