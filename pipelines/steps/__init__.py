# Namespace for pipeline steps
from .reserve_extraction import ReserveExtraction  # noqa: F401
from .run_extraction import RunExtraction, NormalizeScraped  # noqa: F401
from .persist_profile import PersistProfile  # noqa: F401
