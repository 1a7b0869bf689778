"""Pipeline orchestration for end-to-end marketing analysis"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Callable, Union
from datetime import datetime
from pathlib import Path
from enum import Enum
import logging
import pandas as pd

from ..algorithms import OLSRegression, RegressionResults, build_design_matrix
from ..data import DataLoader
from ..exceptions import AnalysisError
from ..models import TimeSeriesTable
from ..outliers import OutlierDetector, OutlierResult, RobustRegression
from ..preprocessing import Cleaner, CleaningReport, FeatureEngineer
from ..utils.config import AnalysisConfig


class StepStatus(str, Enum):
    """Pipeline step status"""
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PipelineStep:
    """Individual pipeline step"""
    name: str
    function: Callable
    dependencies: List[str] = field(default_factory=list)


@dataclass
class StepResult:
    """Result from a pipeline step"""
    step_name: str
    status: StepStatus
    start_time: datetime
    end_time: datetime
    output: Any = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()


@dataclass
class PipelineResult:
    """Overall pipeline execution result"""
    pipeline_id: str
    start_time: datetime
    end_time: datetime
    status: str  # "success" or "failed"
    step_results: Dict[str, StepResult]
    error_summary: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed_step(self) -> Optional[StepResult]:
        """The step that stopped the run, if any"""
        for step_result in self.step_results.values():
            if step_result.status == StepStatus.FAILED:
                return step_result
        return None


class Pipeline:
    """
    Run named steps in dependency order

    Each step function receives the shared context and the results of the
    steps executed so far. The first failing step stops the run; steps
    after it are not executed.
    """

    def __init__(self, name: str):
        self.name = name
        self.steps: Dict[str, PipelineStep] = {}
        self.logger = logging.getLogger(f"pipeline.{name}")

    def add_step(self, step: PipelineStep):
        """Add step to pipeline"""
        self.steps[step.name] = step

    def execute(self, context: Dict[str, Any]) -> PipelineResult:
        """
        Execute pipeline

        Args:
            context: Execution context, updated with ``<step>_output`` keys

        Returns:
            PipelineResult with execution details
        """
        pipeline_id = context.get('pipeline_id', str(datetime.now().timestamp()))
        start_time = datetime.now()
        step_results: Dict[str, StepResult] = {}

        self.logger.info(f"Starting pipeline execution: {pipeline_id}")

        for step_name in self._determine_execution_order():
            step = self.steps[step_name]

            missing = [dep for dep in step.dependencies if dep not in step_results]
            if missing:
                now = datetime.now()
                step_results[step_name] = StepResult(
                    step_name, StepStatus.FAILED, now, now,
                    error=f"Dependencies not met: {missing}"
                )
                break

            step_result = self._execute_step(step, context, step_results)
            step_results[step_name] = step_result

            if step_result.status == StepStatus.FAILED:
                self.logger.error(f"Step {step_name} failed, stopping pipeline")
                break

            context[f"{step_name}_output"] = step_result.output

        failed_steps = [r for r in step_results.values() if r.status == StepStatus.FAILED]

        return PipelineResult(
            pipeline_id=pipeline_id,
            start_time=start_time,
            end_time=datetime.now(),
            status="failed" if failed_steps else "success",
            step_results=step_results,
            error_summary=[f"{r.step_name}: {r.error}" for r in failed_steps],
            metrics={
                'total_duration_seconds': (datetime.now() - start_time).total_seconds(),
                'steps_executed': len(step_results),
                'steps_failed': len(failed_steps)
            }
        )

    def _determine_execution_order(self) -> List[str]:
        """Depth-first topological order; unknown dependencies are ignored"""
        order = []
        visited = set()

        def visit(step_name: str):
            if step_name in visited:
                return
            visited.add(step_name)
            for dep in self.steps[step_name].dependencies:
                if dep in self.steps:
                    visit(dep)
            order.append(step_name)

        for step_name in self.steps:
            visit(step_name)

        return order

    def _execute_step(self, step: PipelineStep, context: Dict[str, Any],
                      previous_results: Dict[str, StepResult]) -> StepResult:
        """Run one step, recording its output or the exception it raised"""
        start_time = datetime.now()
        self.logger.info(f"Executing step: {step.name}")

        try:
            output = step.function(context, previous_results)
        except Exception as e:
            self.logger.error(f"Step {step.name} failed: {e}")
            return StepResult(
                step_name=step.name,
                status=StepStatus.FAILED,
                start_time=start_time,
                end_time=datetime.now(),
                error=str(e),
                exception=e
            )

        return StepResult(
            step_name=step.name,
            status=StepStatus.COMPLETED,
            start_time=start_time,
            end_time=datetime.now(),
            output=output
        )


@dataclass
class AnalysisResult:
    """Everything produced by one analysis run"""
    table: TimeSeriesTable
    row_count: int
    missing_visits: int  # Counted before cleaning
    outlier_count: int
    cleaning_report: CleaningReport
    outlier_result: OutlierResult
    ols: RegressionResults
    robust: RegressionResults
    comparison: pd.DataFrame

    def predictions(self) -> pd.DataFrame:
        """Actual visits with OLS and robust fitted values per day"""
        return pd.DataFrame({
            'date': self.table.dates.to_numpy(),
            'actual': self.table.visits.to_numpy(),
            'ols': self.ols.fitted_values,
            'robust': self.robust.fitted_values
        })

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary"""
        return {
            'rows': self.row_count,
            'missing_visits': self.missing_visits,
            'outliers': self.outlier_count,
            'spend_values_clamped': self.cleaning_report.spend_values_clamped,
            'ols': {
                'coefficients': self.ols.coefficient_dict(),
                'metrics': self.ols.metrics()
            },
            'robust': {
                'coefficients': self.robust.coefficient_dict(),
                'metrics': self.robust.metrics(),
                'iterations': self.robust.convergence_info.get('iterations'),
                'downweighted': self.robust.convergence_info.get('downweighted')
            }
        }


class MarketingAnalysisPipeline(Pipeline):
    """
    Clean, enrich, screen and model a daily marketing table

    Steps run strictly in sequence without retries. The first failure
    aborts the run and its original exception is raised from ``run``.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        super().__init__("marketing_analysis")
        self.config = config or AnalysisConfig()
        self._setup_steps()

    def _setup_steps(self):
        self.add_step(PipelineStep("load_data", self._load_data_step))
        self.add_step(PipelineStep("clean_data", self._clean_data_step,
                                   dependencies=["load_data"]))
        self.add_step(PipelineStep("engineer_features", self._engineer_features_step,
                                   dependencies=["clean_data"]))
        self.add_step(PipelineStep("detect_outliers", self._detect_outliers_step,
                                   dependencies=["engineer_features"]))
        self.add_step(PipelineStep("fit_ols", self._fit_ols_step,
                                   dependencies=["detect_outliers"]))
        self.add_step(PipelineStep("fit_robust", self._fit_robust_step,
                                   dependencies=["fit_ols"]))

    def run(self, source: Union[pd.DataFrame, TimeSeriesTable, str, Path]) -> AnalysisResult:
        """
        Run the full analysis

        Args:
            source: Raw DataFrame, prepared table or path to a CSV file.
                A TimeSeriesTable is modified in place.

        Returns:
            AnalysisResult

        Raises:
            AnalysisError: subclasses from the failing stage
        """
        result = self.execute({'source': source})

        failed = result.failed_step
        if failed is not None:
            if failed.exception is not None:
                raise failed.exception
            raise AnalysisError("; ".join(result.error_summary))

        outputs = {name: r.output for name, r in result.step_results.items()}
        load = outputs['load_data']
        robust_output = outputs['fit_robust']

        self.logger.info(f"Pipeline finished in {result.metrics['total_duration_seconds']:.3f}s")

        return AnalysisResult(
            table=load['table'],
            row_count=load['record_count'],
            missing_visits=load['missing_visits'],
            outlier_count=len(outputs['detect_outliers']['outlier_result'].outlier_indices),
            cleaning_report=outputs['clean_data']['cleaning_report'],
            outlier_result=outputs['detect_outliers']['outlier_result'],
            ols=outputs['fit_ols']['results'],
            robust=robust_output['results'],
            comparison=robust_output['comparison']
        )

    def _load_data_step(self, context: Dict[str, Any], previous_results: Dict[str, StepResult]) -> Dict[str, Any]:
        source = context['source']

        if isinstance(source, TimeSeriesTable):
            table = source
        elif isinstance(source, pd.DataFrame):
            table = TimeSeriesTable.from_frame(source)
        else:
            path = Path(source)
            table = DataLoader(path.parent).load_table(path.name)

        missing = table.missing_visits_count()
        self.logger.info(f"Rows: {len(table)} | Missing visits: {missing}")

        return {
            'table': table,
            'record_count': len(table),
            'missing_visits': missing
        }

    def _clean_data_step(self, context: Dict[str, Any], previous_results: Dict[str, StepResult]) -> Dict[str, Any]:
        table = previous_results['load_data'].output['table']

        cleaner = Cleaner(self.config.cleaning)
        cleaner.clean(table)

        return {'table': table, 'cleaning_report': cleaner.report}

    def _engineer_features_step(self, context: Dict[str, Any], previous_results: Dict[str, StepResult]) -> Dict[str, Any]:
        table = previous_results['clean_data'].output['table']
        FeatureEngineer(self.config.features).enrich(table)
        return {'table': table}

    def _detect_outliers_step(self, context: Dict[str, Any], previous_results: Dict[str, StepResult]) -> Dict[str, Any]:
        table = previous_results['engineer_features'].output['table']

        outlier_result = OutlierDetector(self.config.outliers).detect_outliers(table)

        return {
            'table': table,
            'outlier_result': outlier_result,
            'outlier_rate': outlier_result.statistics['outlier_rate']
        }

    def _fit_ols_step(self, context: Dict[str, Any], previous_results: Dict[str, StepResult]) -> Dict[str, Any]:
        table = previous_results['detect_outliers'].output['table']

        X, y = build_design_matrix(table)
        results = OLSRegression().fit(X, y)

        return {'X': X, 'y': y, 'results': results}

    def _fit_robust_step(self, context: Dict[str, Any], previous_results: Dict[str, StepResult]) -> Dict[str, Any]:
        ols_output = previous_results['fit_ols'].output

        regression = RobustRegression(self.config.robust)
        results = regression.fit_robust(ols_output['X'], ols_output['y'], ols_output['results'])

        return {
            'results': results,
            'comparison': regression.compare_with_ols(),
            'influence': regression.get_influence_statistics()
        }
