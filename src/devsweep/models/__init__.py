"""devsweep data models."""

from devsweep.models.cleaner import Cleaner, CleanerOptions, FixedDirCleaner, ProjectDirCleaner
from devsweep.models.item import CleanableItem, ScanResult, SizeComputationWarning
from devsweep.models.summary import ItemFailure, RunSummary

__all__ = [
    "CleanableItem",
    "Cleaner",
    "CleanerOptions",
    "FixedDirCleaner",
    "ItemFailure",
    "ProjectDirCleaner",
    "RunSummary",
    "ScanResult",
    "SizeComputationWarning",
]
