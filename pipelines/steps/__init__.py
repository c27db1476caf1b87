# Namespace for pipeline steps
from .load_rows import LoadSourceRows  # noqa: F401
from .validate_employees import ValidateEmployees  # noqa: F401
from .persist_employees import PersistEmployees  # noqa: F401
from .enrich_employees import LoadUnenrichedEmployees, SweepEnrichEmployees  # noqa: F401
