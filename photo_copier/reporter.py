"""Human-readable plan and execution reports."""

from datetime import datetime
from typing import List, Optional, Sequence

from .models import CopyItem, CopyPlan

MAX_COPY_LINES = 4


def _format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime('%Y-%m-%d')


class PlanReporter:
    """Formats CopyPlan values for the terminal."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def format_copy_lines(self, items: Sequence[CopyItem]) -> List[str]:
        """One line per item; long lists keep the first and last two lines."""
        lines = [
            f"Copy {item.name}  {item.record.captured_at.strftime('%Y-%m-%d %H:%M')}"
            for item in items
        ]
        if len(lines) <= MAX_COPY_LINES:
            return lines
        return lines[:2] + ["..."] + lines[-2:]

    def dry_run_report(self, plan: CopyPlan) -> str:
        """
        Generate the report shown instead of copying in dry-run mode.

        Args:
            plan: Finished copy plan

        Returns:
            Formatted report
        """
        report = ["Copying:", ""]
        report.extend(self.format_copy_lines(plan.items))
        report.append("")
        report.append("Override Required:")
        report.extend(item.name for item in plan.override_items)
        report.append("")
        report.extend(self._summary(plan, dry_run=True))

        if self.verbose and plan.warnings:
            report.append("")
            report.append("Warnings:")
            report.extend(f"- {warning}" for warning in plan.warnings)

        return "\n".join(report)

    def execution_report(self, plan: CopyPlan, overrides_confirmed: int = 0) -> str:
        """
        Generate the report shown after copying.

        Args:
            plan: Executed copy plan
            overrides_confirmed: Number of overrides the user accepted

        Returns:
            Formatted report
        """
        report = ["Copying:", ""]
        report.extend(self.format_copy_lines(plan.items))

        if plan.override_items:
            report.append("")
            report.append("Override Required:")
            report.extend(item.name for item in plan.override_items)

        report.append("")
        report.extend(self._summary(plan, dry_run=False, overrides_confirmed=overrides_confirmed))

        if self.verbose and plan.warnings:
            report.append("")
            report.append("Warnings:")
            report.extend(f"- {warning}" for warning in plan.warnings)

        return "\n".join(report)

    def _summary(self, plan: CopyPlan, dry_run: bool, overrides_confirmed: int = 0) -> List[str]:
        lines = []
        range_start = _format_date(plan.range_start)
        range_end = _format_date(plan.range_end)

        if not range_start or not range_end:
            lines.append(f"Copied {plan.raw_count} RAW and {plan.jpeg_count} JPEG files.")
        else:
            lines.append(f"Copied {plan.raw_count} RAW and {plan.jpeg_count} JPEG files "
                         f"from {range_start} until {range_end}.")

        lines.append(f"Skipped {plan.skipped_jpegs} JPEGs because their RAW files existed.")

        duplicates = plan.skipped_raws_dupl + plan.skipped_jpegs_dupl
        if duplicates:
            lines.append(f"Skipped {plan.skipped_raws_dupl} RAW and {plan.skipped_jpegs_dupl} "
                         f"JPEG files already present in the target.")

        out_of_range = plan.skipped_raws_date + plan.skipped_jpegs_date
        if out_of_range:
            lines.append(f"Skipped {plan.skipped_raws_date} RAW and {plan.skipped_jpegs_date} "
                         f"JPEG files outside the date range.")

        if dry_run:
            if plan.override_count:
                lines.append(self._override_line(
                    plan, "Would ask for override confirmation for {} when not in dry run."))
            else:
                lines.append("No override confirmation would be required.")
            return lines

        if not plan.override_count:
            lines.append("No override confirmation was required.")
        else:
            verb = "granted" if overrides_confirmed else "declined"
            lines.append(self._override_line(plan, f"Override confirmation {verb} for {{}}."))
        return lines

    @staticmethod
    def _override_line(plan: CopyPlan, template: str) -> str:
        if plan.raw_overrides and not plan.jpeg_overrides:
            counts = f"{plan.raw_overrides} RAW files"
        elif plan.jpeg_overrides and not plan.raw_overrides:
            counts = f"{plan.jpeg_overrides} JPEG files"
        else:
            counts = f"{plan.raw_overrides} RAW and {plan.jpeg_overrides} JPEG files"
        return template.format(counts)
