# ============================================================================
# TOOLS MODULE
# ============================================================================
# STATUS: Tools - Command-line entry points
# PURPOSE: Operator tooling around the schema graph build
# CREATED: 19 OCT 2026
# ============================================================================
