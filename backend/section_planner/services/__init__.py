from section_planner.services.catalog import (  # noqa: F401
    CatalogContext,
    SchedulingPolicy,
    build_catalog_context,
    build_conflict_index,
    build_sections,
    parse_conflict_pairs,
)
from section_planner.services.diagnostics import diagnose_failure, suggest_substitution  # noqa: F401
from section_planner.services.export import export_csv  # noqa: F401
from section_planner.services.overrides import apply_manual_override, validate_manual_override  # noqa: F401
from section_planner.services.preassignment import (  # noqa: F401
    apply_preassignments,
    detect_preassignment_conflict,
)
from section_planner.services.roster_import import parse_roster_rows, read_roster_csv  # noqa: F401
from section_planner.services.scheduler import (  # noqa: F401
    assemble_result,
    schedule_remaining,
    schedule_students,
)
from section_planner.services.search import (  # noqa: F401
    BLOCKS_ONLY,
    IGNORE_CONFLICTS,
    STRICT,
    SearchCapabilities,
    assignment_cost,
    find_valid_assignments,
    select_best_assignment,
)
