from cyfra_client.analysis.orchestrator import (
    AnalysisOrchestrator,
    AnalysisSelection,
    build_request,
)
from cyfra_client.analysis.results import (
    SceneSummary,
    index_full_name,
    summarize_result,
)

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisSelection",
    "SceneSummary",
    "build_request",
    "index_full_name",
    "summarize_result",
]
