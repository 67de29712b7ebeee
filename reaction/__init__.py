from .results import TrialRecord, ResultStore
from .trial import TrialController, TrialState, Stimulus
from .export import serialize, parse, export_to_destination, ExportResult
from .settings import TrialSettings
from .stats import SessionSummary, summarize

__all__ = [
    "TrialRecord", "ResultStore",
    "TrialController", "TrialState", "Stimulus",
    "serialize", "parse", "export_to_destination", "ExportResult",
    "TrialSettings",
    "SessionSummary", "summarize",
]
