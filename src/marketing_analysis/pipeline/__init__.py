"""Pipeline orchestration module"""

from .orchestrator import (
    Pipeline,
    PipelineStep,
    PipelineResult,
    StepResult,
    StepStatus,
    MarketingAnalysisPipeline,
    AnalysisResult
)

__all__ = [
    'Pipeline',
    'PipelineStep',
    'PipelineResult',
    'StepResult',
    'StepStatus',
    'MarketingAnalysisPipeline',
    'AnalysisResult'
]
