# Output formatters for ranked follow reports

import json
from datetime import datetime, timezone

from follow_ranker.constants import TABLE_COLUMNS
from follow_ranker.services.enrichment import EnrichmentResult
from follow_ranker.services.follow_graph import GraphReport


def _row_values(row) -> dict[str, str]:
    profile = row.profile
    return {
        "login": profile.identity,
        "repos": str(profile.public_repo_count),
        "following": str(profile.followee_count),
        "followers": str(profile.follower_count),
        "score": f"{row.impact_score:.3f}",
        "url": profile.profile_url,
    }


def format_table(result: EnrichmentResult, limit: int | None = None) -> str:
    """
    Format one ranked category as a table.

    Returns - Table string
    """
    rows = result.rows[:limit] if limit else result.rows
    if not rows:
        return "No users found.\n"

    columns = TABLE_COLUMNS
    values = [_row_values(row) for row in rows]

    # Calculate column widths
    widths = {col: len(col) for col in columns}
    for row in values:
        for col in columns:
            widths[col] = max(widths[col], len(row[col]))

    output = []

    # Header
    header = " | ".join(col.ljust(widths[col]) for col in columns)
    output.append(header)
    output.append("-" * len(header))

    # Rows; numbers right-aligned
    for row in values:
        cells = []
        for col in columns:
            if col in ("login", "url"):
                cells.append(row[col].ljust(widths[col]))
            else:
                cells.append(row[col].rjust(widths[col]))
        output.append(" | ".join(cells))

    if limit and len(result.rows) > limit:
        output.append(f"... {len(result.rows) - limit} more")

    return "\n".join(output) + "\n"


def format_failures(result: EnrichmentResult) -> str:
    if not result.failures:
        return ""
    lines = [f"Could not resolve {result.failed_count} user(s):"]
    for identity, error in sorted(result.failures.items()):
        lines.append(f"  - {identity}: {error}")
    return "\n".join(lines) + "\n"


def format_summary(report: GraphReport) -> str:
    """
    Format the summary counts and follower changes.

    Returns - Text block
    """
    output = [f"{name}: {count}" for name, count in report.counts().items()]

    updated = datetime.fromtimestamp(report.last_update, tz=timezone.utc)
    output.append(f"relations updated: {updated.isoformat(timespec='seconds')}")

    if report.newly_gained:
        output.append(f"new followers: {', '.join(report.newly_gained)}")
    if report.newly_lost:
        output.append(f"lost followers: {', '.join(report.newly_lost)}")

    return "\n".join(output) + "\n"


def format_text(report: GraphReport, limit: int | None = None) -> str:
    """Full report: summary, then one table per category."""
    output = [format_summary(report)]
    for category, section in report.sections.items():
        output.append(f"# {category.heading}")
        output.append(format_table(section, limit))
        failures = format_failures(section)
        if failures:
            output.append(failures)
    return "\n".join(output)


def format_json(report: GraphReport, limit: int | None = None) -> str:
    """
    Format the report as JSON.

    Returns - JSON string
    """
    data = report.to_dict()
    if limit:
        for section in data["sections"].values():
            section["rows"] = section["rows"][:limit]
    return json.dumps(data, indent=2, default=str)


def format_output(report: GraphReport, output_format: str = "table", limit: int | None = None) -> str:
    if output_format == "json":
        return format_json(report, limit)
    return format_text(report, limit)
