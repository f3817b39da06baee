"""
Prefect Workflow Orchestration - Daily Statistics

Scheduled collection of VS Code Marketplace statistics for one or more
extensions into the configured output directory.

Deployments must not overlap: a second run writing to the same output
directory at the same time can lose that day's row.
"""

from typing import List, Optional

from prefect import flow, task, get_run_logger

from vscodestat.collector import VscodeStatCollector, extension_postfixes
from vscodestat.config import get_settings

settings = get_settings()


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="collect_extension_stats",
    description="Collect and store today's statistics of one extension",
)
async def collect_extension_stats(
    extension_name: str,
    out_dir: Optional[str] = None,
    postfix: Optional[str] = None,
) -> dict:
    """Run one collection cycle; vsce retries are handled by the collector"""
    logger = get_run_logger()

    collector = VscodeStatCollector.from_settings(
        settings, extension_name=extension_name, out_dir=out_dir
    )

    merged = await collector.write_stats(postfix=postfix)
    rows = {name: len(df) for name, df in merged.items()}

    logger.info(f"Stored statistics of {extension_name}: {rows}")
    return {"extension": extension_name, "files": rows}


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="daily_vscode_stats",
    description="Daily VS Code Marketplace statistics collection",
)
async def daily_vscode_stats(
    extensions: Optional[List[str]] = None,
    out_dir: Optional[str] = None,
) -> dict:
    """
    Daily statistics collection.

    Extensions are processed one after another. When several are collected
    each writes its own files, named `{bucket}_{extension}_{postfix}.csv`.
    """
    logger = get_run_logger()

    extensions = extensions or [settings.collector.extension_name]
    postfixes = extension_postfixes(extensions, settings.collector.file_postfix)
    results = {"extensions": [], "failed": []}

    for extension_name, postfix in postfixes.items():
        try:
            result = await collect_extension_stats(extension_name, out_dir, postfix)
            results["extensions"].append(result)
        except Exception as e:
            logger.error(f"Collecting {extension_name} failed: {e}")
            results["failed"].append(extension_name)

    if results["failed"]:
        raise RuntimeError(f"Statistics collection failed for: {results['failed']}")

    return results


if __name__ == "__main__":
    import asyncio

    asyncio.run(daily_vscode_stats())
