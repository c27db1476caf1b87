from .company_record import CompanyRecord
from .employee_record import EmployeeRecord
from .lookup_profile import LookupProfile
from .enrichment_outcome import DegradeReason, EnrichmentOutcome, EnrichmentState
from .reports import IngestIssue, IngestReport, SweepProgress, SweepReport

__all__ = [
    "CompanyRecord",
    "EmployeeRecord",
    "LookupProfile",
    "DegradeReason",
    "EnrichmentOutcome",
    "EnrichmentState",
    "IngestIssue",
    "IngestReport",
    "SweepProgress",
    "SweepReport",
]
