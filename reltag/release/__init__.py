"""Release workflow: version record, guard, changelog, gates and orchestration."""
