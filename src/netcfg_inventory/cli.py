from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter
from typing import IO, Any, Dict, Iterator, List, Optional, Sequence

from .aws.clients import get_ec2_client, set_client_connection_pool_size
from .aws.identity import get_account_id
from .aws.regions import get_enabled_regions
from .aws.session import AuthContext, AuthError, resolve_session
from .collect.account import download_account
from .collect.region import Ec2ResourceLister
from .config import RunConfig, dump_config, load_run_config
from .dataset.store import load_dataset
from .export.csv import write_csv_rows
from .export.json import write_json
from .export.parquet import ParquetNotAvailable, write_parquet_rows
from .logging import LogConfig, get_logger, setup_logging
from .report.cidr import global_vpc_cidr_rows, global_vpc_cidrs, vpc_cidr_report, vpc_cidr_rows
from .util.errors import AuthResolutionError, ConfigError, ExportError, as_exit_code
from .util.rich_progress import RunProgress, render_download_summary_table

LOG = get_logger(__name__)


class _StepTimers:
    def __init__(self) -> None:
        self._starts: Dict[str, float] = {}

    def start(self, key: str) -> None:
        self._starts[key] = perf_counter()

    def finish(self, key: str) -> Optional[int]:
        started = self._starts.pop(key, None)
        if started is None:
            return None
        return int((perf_counter() - started) * 1000)


def _log_event(
    logger: Any,
    level: int,
    message: str,
    *,
    step: str,
    phase: str,
    timers: Optional[_StepTimers] = None,
    timer_key: Optional[str] = None,
    **extra: Any,
) -> None:
    key = timer_key or step
    duration_ms = None
    if timers is not None:
        if phase == "start":
            timers.start(key)
        elif phase in {"complete", "error"}:
            duration_ms = timers.finish(key)
    payload: Dict[str, Any] = {"step": step, "phase": phase, "event": f"{step}.{phase}"}
    if duration_ms is not None:
        payload["duration_ms"] = duration_ms
    payload.update(extra)
    logger.log(level, message, extra=payload)


def _resolve_auth(cfg: RunConfig) -> AuthContext:
    try:
        return resolve_session(cfg.profile, cfg.region)
    except AuthError as e:
        raise AuthResolutionError(str(e)) from e


def _require_data_file(cfg: RunConfig) -> Path:
    if cfg.data_file is None:
        raise ConfigError("Data file not provided (use --data-file)")
    return cfg.data_file


@contextmanager
def _open_output(output_file: Optional[Path]) -> Iterator[IO[str]]:
    if output_file is None:
        yield sys.stdout
        sys.stdout.flush()
        return
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with output_file.open("w", encoding="utf-8", newline="") as f:
        yield f


def _write_report(cfg: RunConfig, result: Any, rows: Sequence[Sequence[str]]) -> None:
    if cfg.format == "parquet":
        if cfg.output_file is None:
            raise ConfigError("Parquet output requires --output-file")
        try:
            write_parquet_rows(rows, cfg.output_file)
        except ParquetNotAvailable as e:
            raise ExportError(str(e)) from e
        return
    with _open_output(cfg.output_file) as out:
        if cfg.format == "csv":
            write_csv_rows(rows, out)
        else:
            write_json(result, out)


def cmd_download(cfg: RunConfig) -> int:
    data_file = _require_data_file(cfg)
    timers = _StepTimers()
    _log_event(
        LOG,
        logging.INFO,
        "Download started",
        step="download",
        phase="start",
        timers=timers,
        data_file=str(data_file),
        config=dump_config(cfg),
    )

    ctx = _resolve_auth(cfg)
    set_client_connection_pool_size(cfg.workers_resource)

    with RunProgress(enabled=cfg.progress) as progress:

        def _list_regions() -> List[str]:
            regions = list(cfg.regions) if cfg.regions else get_enabled_regions(ctx)
            progress.start_collection(regions)
            return regions

        def _make_lister(region: str) -> Ec2ResourceLister:
            return Ec2ResourceLister(get_ec2_client(ctx, region), region)

        summary = download_account(
            data_file,
            resolve_account_id=lambda: get_account_id(ctx),
            list_regions=_list_regions,
            make_lister=_make_lister,
            workers_region=cfg.workers_region,
            workers_resource=cfg.workers_resource,
            on_region_done=progress.region_done,
        )

    _log_event(
        LOG,
        logging.INFO,
        "Download complete",
        step="download",
        phase="complete",
        timers=timers,
        account_id=summary.account_id,
        region_count=len(summary.regions),
    )
    render_download_summary_table(
        enabled=cfg.progress,
        account_id=summary.account_id,
        regions=summary.regions,
        counts=summary.counts,
        data_file=str(summary.data_file),
    )
    return 0


def cmd_vpc_cidr(cfg: RunConfig) -> int:
    data_file = _require_data_file(cfg)
    timers = _StepTimers()
    _log_event(LOG, logging.DEBUG, "VPC CIDR report started", step="vpc-cidr", phase="start", timers=timers)
    result = vpc_cidr_report(
        load_dataset(data_file),
        include_subnets=cfg.include_subnets,
        include_default_vpcs=cfg.include_default_vpcs,
    )
    _write_report(cfg, result, vpc_cidr_rows(result, include_subnets=cfg.include_subnets))
    _log_event(LOG, logging.DEBUG, "VPC CIDR report complete", step="vpc-cidr", phase="complete", timers=timers)
    return 0


def cmd_global_vpc_cidr(cfg: RunConfig) -> int:
    data_file = _require_data_file(cfg)
    timers = _StepTimers()
    _log_event(
        LOG, logging.DEBUG, "Global VPC CIDR report started", step="global-vpc-cidr", phase="start", timers=timers
    )
    result = global_vpc_cidrs(
        load_dataset(data_file),
        include_default_vpcs=cfg.include_default_vpcs,
        duplicates_only=cfg.duplicates_only,
    )
    _write_report(cfg, result, global_vpc_cidr_rows(result))
    _log_event(
        LOG,
        logging.DEBUG,
        "Global VPC CIDR report complete",
        step="global-vpc-cidr",
        phase="complete",
        timers=timers,
        count=len(result["vpcCidrBlocks"]),
    )
    return 0


def cmd_list_regions(cfg: RunConfig) -> int:
    ctx = _resolve_auth(cfg)
    for r in get_enabled_regions(ctx):
        print(r)
    return 0


def cmd_validate_auth(cfg: RunConfig) -> int:
    ctx = _resolve_auth(cfg)
    account_id = get_account_id(ctx)
    LOG.info("Authentication validated", extra={"profile": cfg.profile, "account_id": account_id})
    print(f"OK: authentication validated; account {account_id}")
    return 0


COMMAND_HANDLERS = {
    "download": cmd_download,
    "vpc-cidr": cmd_vpc_cidr,
    "global-vpc-cidr": cmd_global_vpc_cidr,
    "list-regions": cmd_list_regions,
    "validate-auth": cmd_validate_auth,
}


def main(argv: Optional[List[str]] = None) -> None:
    try:
        command, cfg = load_run_config(argv=argv)
        setup_logging(LogConfig(level=cfg.log_level, json_logs=cfg.json_logs))

        handler = COMMAND_HANDLERS.get(command)
        if handler is None:
            raise ConfigError(f"Unknown command: {command}")
        sys.exit(handler(cfg))
    except SystemExit:
        raise
    except BrokenPipeError:
        # Common when users pipe to `head` or similar tools.
        sys.exit(0)
    except Exception as e:
        # Map to consistent exit code and log
        setup_logging(LogConfig())
        LOG.error("Execution failed", extra={"error": str(e)})
        sys.exit(as_exit_code(e))


if __name__ == "__main__":
    main()
