from .domain.service import SavingsService
from .domain.pr_note import render_pr_note

__all__ = ["SavingsService", "render_pr_note"]
