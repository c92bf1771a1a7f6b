from decimal import Decimal

from app.models.savings import SavingIdea


def _plain_number(value) -> str:
    """1000.00 -> '1000', 0.80 -> '0.8'."""
    text = format(Decimal(str(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def render_pr_note(idea: SavingIdea) -> str:
    """
    Copy-ready Markdown PR note for a saving idea.

    Realized saving = estimated monthly saving x confidence, to two decimals.
    """
    est_monthly = Decimal(str(idea.est_monthly_saving_usd or 0))
    confidence = Decimal(str(idea.confidence or 0))
    realized = f"{float(est_monthly * confidence):.2f}"

    lines = [
        "## Change",
        f"{idea.title} ({idea.service})",
        "",
        "## Savings",
        f"Estimated Monthly: ${_plain_number(est_monthly)} × Confidence {_plain_number(confidence)} = **${realized}**",
        "",
        "## Pre-checks",
        "- Baseline metrics collected",
        f"- Owner: {idea.owner}",
        "",
        "## Validation",
        "Ensure performance metrics remain within expected thresholds post-change.",
        "",
        "## Rollback",
        "If regression occurs, revert configuration or deployment.",
        "",
        "---",
        "",
        f"**Status:** {idea.status}",
    ]
    return "\n".join(lines)
