"""Shared report formatting helpers.

Keeping formatting here keeps CLI output consistent regardless of the
selected output mode.
"""

from __future__ import annotations

from typing import Iterable, List

from core.aggregation import find_mariage_pairs, format_final_results, group_hits_by_day, unique_numbers
from core.models import AnalysisResult, VerificationHit
from core.schemas import Location

DIVIDER = "──────────────"


def _format_set_lines(result: AnalysisResult, location: Location) -> List[str]:
    lines = []
    for analysis_set in result.analysis_sets:
        labels = ", ".join(location.schema.label_for(index) for index in analysis_set.input_indices)
        days = " | ".join(
            f"{day.english_name}: [{', '.join(str(n) for n in numbers)}]"
            for day, numbers in analysis_set.matching_result.days.items()
        )
        lines.append(f"{analysis_set.id} <- {labels}: {days}")
    return lines


def _format_log_lines(result: AnalysisResult) -> List[str]:
    lines = []
    for entry in result.detailed_log:
        lines.append(f"{entry.input_label} = {entry.input_number:02d} ({entry.analysis_set_id})")
        for check in entry.week_checks:
            if check.historical_hits:
                hits = ", ".join(
                    f"{hit.number_found:02d} ({hit.match_type.value})" for hit in check.historical_hits
                )
            else:
                hits = "no match"
            lines.append(f"  Week {check.week}: {check.date1} & {check.date2}: {hits}")
    return lines


def _format_text(result: AnalysisResult, location: Location, reference: str) -> str:
    lines = [f"{location.name} analysis from {reference}", DIVIDER]

    if not result.analysis_sets:
        lines.append("Nothing to analyze: no input matched the catalog.")
        return "\n".join(lines)

    lines.append("Sets:")
    lines.extend(f"  {line}" for line in _format_set_lines(result, location))

    formatted = format_final_results(result.raw_results)
    lines.extend(["", "Hits:"])
    if formatted:
        lines.extend(f"  {item.display} [{item.match_type.value}]" for item in formatted)
    else:
        lines.append("  none")

    pairs = find_mariage_pairs(unique_numbers(result.raw_results))
    if pairs:
        lines.extend(["", "Mariage:", f"  {' '.join(pairs)}"])

    by_day = group_hits_by_day(result.detailed_log)
    if by_day:
        lines.extend(["", "Hits by day:"])
        for day_name, hits in by_day.items():
            lines.append(f"  {day_name}: {', '.join(f'{hit.number:02d}' for hit in hits)}")

    lines.extend(["", "Step log:"])
    lines.extend(f"  {line}" for line in _format_log_lines(result))
    lines.append(DIVIDER)
    return "\n".join(lines)


def _format_markdown(result: AnalysisResult, location: Location, reference: str) -> str:
    def escape_md(value: str) -> str:
        for ch in r"*[`_":
            value = value.replace(ch, f"\\{ch}")
        return value

    lines = [f"## {escape_md(location.name)} analysis from {reference}", ""]

    if not result.analysis_sets:
        lines.append("_Nothing to analyze: no input matched the catalog._")
        return "\n".join(lines)

    lines.append("**Sets:**")
    lines.extend(f"- {escape_md(line)}" for line in _format_set_lines(result, location))

    lines.extend(["", "**Hits:**"])
    formatted = format_final_results(result.raw_results)
    if formatted:
        lines.extend(f"- `{item.display}` {item.match_type.value}" for item in formatted)
    else:
        lines.append("- none")

    pairs = find_mariage_pairs(unique_numbers(result.raw_results))
    if pairs:
        lines.extend(["", "**Mariage:** " + " ".join(f"`{pair}`" for pair in pairs)])

    by_day = group_hits_by_day(result.detailed_log)
    if by_day:
        lines.extend(["", "**Hits by day:**"])
        for day_name, hits in by_day.items():
            lines.append(f"- {day_name}: {', '.join(f'{hit.number:02d}' for hit in hits)}")

    lines.extend(["", "**Step log:**", "```"])
    lines.extend(_format_log_lines(result))
    lines.append("```")
    return "\n".join(lines)


def format_report(result: AnalysisResult, location: Location, reference: str, mode: str) -> str:
    """Return the analysis report formatted for the requested mode."""

    if mode == "text":
        return _format_text(result, location, reference)
    if mode == "markdown":
        return _format_markdown(result, location, reference)
    raise ValueError(f"Unsupported report format: {mode}")


def format_verification(hits: Iterable[VerificationHit], location: Location, day_name: str) -> str:
    hits = list(hits)
    if not hits:
        return f"No matches found for {day_name} in {location.name}."

    lines = [f"{len(hits)} historical match(es) for {day_name} in {location.name}:"]
    for hit in hits:
        lines.append(f"  Week {hit.week} {hit.date}: {hit.number_found:02d} ({hit.match_type.value})")
    return "\n".join(lines)
