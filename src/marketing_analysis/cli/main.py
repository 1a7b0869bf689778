"""Main CLI entry point for marketing analysis"""

import click
import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional, Dict, Any

from ..data import DataLoader, SyntheticDataGenerator, to_json_safe
from ..exceptions import AnalysisError
from ..pipeline import MarketingAnalysisPipeline
from ..utils.config import AnalysisConfig, load_config


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('marketing-cli')


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False), help='Configuration file path')
@click.option('--debug/--no-debug', default=False, help='Enable debug mode')
@click.pass_context
def cli(ctx, config: Optional[str], debug: bool):
    """Marketing Analysis Command Line Interface"""
    ctx.ensure_object(dict)

    try:
        ctx.obj['config'] = AnalysisConfig.from_dict(load_config(config) if config else {})
    except AnalysisError as e:
        raise click.ClickException(str(e))

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        ctx.obj['debug'] = True


@cli.command()
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True, help='Output CSV file')
@click.option('--seed', default=42, type=int, help='Random seed')
@click.option('--start-date', '-s', type=click.DateTime(formats=["%Y-%m-%d"]), default='2024-01-01')
@click.option('--end-date', '-e', type=click.DateTime(formats=["%Y-%m-%d"]), default='2024-03-31')
@click.option('--num-missing', default=8, type=int, help='Visits values to blank out')
@click.option('--num-outliers', default=5, type=int, help='Visits values to spike or dip')
@click.pass_context
def generate(ctx, output: str, seed: int, start_date: datetime, end_date: datetime,
             num_missing: int, num_outliers: int):
    """Generate a synthetic raw marketing dataset"""
    logger.info("Generating synthetic data")

    generator = SyntheticDataGenerator(seed=seed)
    try:
        df = generator.generate(
            start_date=start_date.date(),
            end_date=end_date.date(),
            num_missing=num_missing,
            num_outliers=num_outliers
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    output_path = Path(output)
    DataLoader(output_path.parent).save_frame(df, output_path.name)

    click.echo(f"Generated {len(df)} days ({start_date.date()} to {end_date.date()}) -> {output_path}")


@cli.command()
@click.option('--input', '-i', 'input_path', type=click.Path(exists=True, dir_okay=False), required=True,
              help='Raw marketing CSV')
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True, help='Cleaned/enriched CSV')
@click.option('--summary', type=click.Path(dir_okay=False), help='Write the summary as JSON to this file')
@click.option('--report-dir', type=click.Path(file_okay=False), help='Directory for prediction and comparison tables')
@click.option('--format', '-f', 'fmt', type=click.Choice(['text', 'json']), default='text', help='Summary output format')
@click.option('--max-iterations', type=int, help='Robust reweighting passes (default from config)')
@click.pass_context
def analyze(ctx, input_path: str, output: str, summary: Optional[str], report_dir: Optional[str],
            fmt: str, max_iterations: Optional[int]):
    """Clean, enrich and model a marketing dataset"""
    config: AnalysisConfig = ctx.obj.get('config') or AnalysisConfig()
    if max_iterations is not None:
        if max_iterations < 1:
            raise click.BadParameter("must be >= 1", param_hint='--max-iterations')
        config.robust.max_iterations = max_iterations

    logger.info(f"Analyzing {input_path}")

    pipeline = MarketingAnalysisPipeline(config)
    try:
        result = pipeline.run(Path(input_path))
    except AnalysisError as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")

    output_path = Path(output)
    loader = DataLoader(output_path.parent)
    loader.save_table(result.table, output_path.name)

    summary_dict = result.to_dict()
    if summary:
        summary_path = Path(summary)
        DataLoader(summary_path.parent).save_summary(summary_dict, summary_path.name)

    if report_dir:
        loader.save_results({
            'predictions': result.predictions(),
            'ols_vs_robust': result.comparison
        }, output_dir=report_dir)

    if fmt == 'json':
        click.echo(json.dumps(to_json_safe(summary_dict), indent=2, default=str, allow_nan=False))
    else:
        click.echo(_format_summary_text(summary_dict))
    click.echo(f"Saved cleaned dataset to {output_path}")


def _format_summary_text(summary: Dict[str, Any]) -> str:
    """Format analysis summary as text"""
    lines = [
        "Marketing Analysis Summary",
        "=" * 50,
        f"Rows: {summary['rows']}  |  Missing Visits: {summary['missing_visits']}",
        f"Detected {summary['outliers']} outliers in Visits.",
        "",
    ]

    for label, key in (("OLS", 'ols'), ("Weighted OLS (robust)", 'robust')):
        coefs = summary[key]['coefficients']
        metrics = summary[key]['metrics']
        lines.extend([
            f"{label} Coefficients [Intercept, AdSpend, IsWeekend]:",
            "  " + "  ".join(f"{value:.4f}" for value in coefs.values()),
            f"  R^2 = {metrics['r_squared']:.3f}   |   MAE = {metrics['mae']:.1f}   |   RMSE = {metrics['rmse']:.1f}",
            "",
        ])

    return "\n".join(lines).rstrip()


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == '__main__':
    main()
