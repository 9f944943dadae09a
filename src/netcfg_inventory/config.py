from __future__ import annotations

import argparse
import json
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .aws.session import DEFAULT_REGION
from .collect.account import DEFAULT_WORKERS_REGION
from .collect.region import DEFAULT_WORKERS_RESOURCE

# --------
# Defaults
# --------
OUTPUT_FORMATS = {"json", "csv", "parquet"}
DEFAULT_FORMAT = "json"
COMMANDS = ("download", "vpc-cidr", "global-vpc-cidr", "list-regions", "validate-auth")
ALLOWED_CONFIG_KEYS = {
    "data_file",
    "output_file",
    "format",
    "include_subnets",
    "include_default_vpcs",
    "duplicates_only",
    "regions",
    "workers_region",
    "workers_resource",
    "profile",
    "region",
    "log_level",
    "json_logs",
    "progress",
}
BOOL_CONFIG_KEYS = {"include_subnets", "include_default_vpcs", "duplicates_only", "json_logs", "progress"}
INT_CONFIG_KEYS = {"workers_region", "workers_resource"}
PATH_CONFIG_KEYS = {"data_file", "output_file"}
STR_CONFIG_KEYS = {"format", "profile", "region", "log_level"}


@dataclass(frozen=True)
class RunConfig:
    # Dataset and output
    data_file: Optional[Path] = None
    output_file: Optional[Path] = None
    format: str = DEFAULT_FORMAT

    # Report options
    include_subnets: bool = False
    include_default_vpcs: bool = False
    duplicates_only: bool = False

    # Collection
    regions: Optional[List[str]] = None
    workers_region: int = DEFAULT_WORKERS_REGION
    workers_resource: int = DEFAULT_WORKERS_RESOURCE

    # AWS
    profile: Optional[str] = None
    region: str = DEFAULT_REGION

    # Logging / UI
    log_level: str = "INFO"
    json_logs: bool = False
    progress: bool = True


def _parse_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Top-level config must be an object")
    return data


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    return raw


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip().lower()
    if not raw:
        return None
    return raw in {"1", "true", "yes", "on"}


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in {"1", "true", "yes", "on"}:
            return True
        if raw in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"Config field '{key}' must be a boolean")


def _coerce_int(key: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return int(value)
        except ValueError:
            pass
    raise ValueError(f"Config field '{key}' must be an integer")


def _split_regions(value: Any) -> List[str]:
    if isinstance(value, str):
        return [r.strip() for r in value.split(",") if r.strip()]
    if isinstance(value, list) and all(isinstance(r, str) for r in value):
        return [r.strip() for r in value if r.strip()]
    raise ValueError("Config field 'regions' must be a list of strings or comma-separated string")


def _normalize_config_file(data: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data.keys()) - ALLOWED_CONFIG_KEYS)
    if unknown:
        warnings.warn(f"Unknown config keys ignored: {', '.join(unknown)}")
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in ALLOWED_CONFIG_KEYS:
            continue
        if value is None:
            normalized[key] = None
            continue
        if key == "regions":
            normalized[key] = _split_regions(value)
        elif key in BOOL_CONFIG_KEYS:
            normalized[key] = _coerce_bool(key, value)
        elif key in INT_CONFIG_KEYS:
            normalized[key] = _coerce_int(key, value)
        elif key in PATH_CONFIG_KEYS:
            if isinstance(value, (str, Path)):
                normalized[key] = value
            else:
                raise ValueError(f"Config field '{key}' must be a string path")
        elif key in STR_CONFIG_KEYS:
            if isinstance(value, str):
                normalized[key] = value
            else:
                raise ValueError(f"Config field '{key}' must be a string")
        else:
            normalized[key] = value
    fmt = normalized.get("format")
    if fmt is not None:
        fmt = str(fmt).lower()
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"Config field 'format' must be one of: {', '.join(sorted(OUTPUT_FORMATS))}")
        normalized["format"] = fmt
    return _compact_dict(normalized)


def _compact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop keys with None values so they don't override lower-precedence config.
    """
    return {k: v for k, v in data.items() if v is not None}


def _merge_dicts(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge: values in b override a.
    """
    merged = dict(a)
    merged.update(b)
    return merged


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="netcfg-inv", description="AWS network configuration inventory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # common flags builder
    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", type=Path, help="Optional YAML/JSON config file")
        p.add_argument(
            "--json-logs",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Enable JSON logs",
        )
        p.add_argument("--log-level", default=None, help="Log level (INFO, DEBUG, ...)")
        p.add_argument("--profile", default=None, help="AWS shared config profile")
        p.add_argument(
            "--region",
            default=None,
            help=f"Bootstrap region for account-wide calls (default {DEFAULT_REGION})",
        )

    def add_data_file(p: argparse.ArgumentParser) -> None:
        p.add_argument("--data-file", type=Path, default=None, help="Multi-account dataset file (JSON)")

    def add_output(p: argparse.ArgumentParser) -> None:
        p.add_argument("--output-file", type=Path, default=None, help="Write the report here instead of stdout")
        p.add_argument(
            "--format",
            default=None,
            choices=sorted(OUTPUT_FORMATS),
            help=f"Report format (default {DEFAULT_FORMAT})",
        )
        p.add_argument(
            "--include-default-vpcs",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Include each region's default VPC",
        )

    # download
    p_dl = subparsers.add_parser("download", help="Download network configuration for the calling account")
    add_common(p_dl)
    add_data_file(p_dl)
    p_dl.add_argument(
        "--regions",
        default=None,
        help="Comma-separated list of regions to scan (overrides enabled regions)",
    )
    p_dl.add_argument(
        "--workers-region", type=int, default=None, help=f"Max parallel regions (default {DEFAULT_WORKERS_REGION})"
    )
    p_dl.add_argument(
        "--workers-resource",
        type=int,
        default=None,
        help=f"Max parallel listings per region (default {DEFAULT_WORKERS_RESOURCE})",
    )
    p_dl.add_argument(
        "--progress",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show a progress bar and summary table on a terminal",
    )

    # vpc-cidr
    p_vc = subparsers.add_parser("vpc-cidr", help="Report VPC CIDR blocks per account, region and VPC")
    add_common(p_vc)
    add_data_file(p_vc)
    add_output(p_vc)
    p_vc.add_argument(
        "--include-subnets",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include subnets in the output",
    )

    # global-vpc-cidr
    p_gc = subparsers.add_parser("global-vpc-cidr", help="Report distinct VPC CIDR blocks across all accounts")
    add_common(p_gc)
    add_data_file(p_gc)
    add_output(p_gc)
    p_gc.add_argument(
        "--duplicates-only",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only report CIDR blocks used by more than one VPC",
    )

    # list-regions
    p_lr = subparsers.add_parser("list-regions", help="List regions enabled for the account")
    add_common(p_lr)

    # validate-auth
    p_va = subparsers.add_parser("validate-auth", help="Validate credentials and print the account id")
    add_common(p_va)

    return parser


def load_run_config(
    args: Optional[argparse.Namespace] = None,
    argv: Optional[list[str]] = None,
) -> Tuple[str, RunConfig]:
    """
    Build RunConfig by merging defaults, optional config file, env vars, and CLI args.
    Precedence (low -> high): defaults < config file < env < CLI.

    Returns:
      (command, RunConfig) where command is one of COMMANDS
    """
    ns = args if args is not None else build_parser().parse_args(argv)
    command = ns.command

    # defaults
    base: Dict[str, Any] = {
        "data_file": None,
        "output_file": None,
        "format": DEFAULT_FORMAT,
        "include_subnets": False,
        "include_default_vpcs": False,
        "duplicates_only": False,
        "regions": None,
        "workers_region": DEFAULT_WORKERS_REGION,
        "workers_resource": DEFAULT_WORKERS_RESOURCE,
        "profile": None,
        "region": DEFAULT_REGION,
        "log_level": "INFO",
        "json_logs": False,
        "progress": True,
    }

    # config file
    file_cfg: Dict[str, Any] = {}
    if getattr(ns, "config", None):
        file_cfg = _normalize_config_file(_parse_config_file(Path(ns.config)))

    # env
    env_cfg: Dict[str, Any] = _compact_dict(
        {
            "data_file": _env_str("NETCFG_INV_DATA_FILE"),
            "format": _env_str("NETCFG_INV_FORMAT"),
            "regions": _env_str("NETCFG_INV_REGIONS"),
            "workers_region": _env_int("NETCFG_INV_WORKERS_REGION"),
            "workers_resource": _env_int("NETCFG_INV_WORKERS_RESOURCE"),
            "profile": _env_str("NETCFG_INV_PROFILE") or _env_str("AWS_PROFILE"),
            "region": _env_str("NETCFG_INV_REGION"),
            "log_level": _env_str("NETCFG_INV_LOG_LEVEL"),
            "json_logs": _env_bool("NETCFG_INV_JSON_LOGS"),
            "progress": _env_bool("NETCFG_INV_PROGRESS"),
        }
    )

    # CLI
    cli_cfg: Dict[str, Any] = _compact_dict(
        {
            "data_file": getattr(ns, "data_file", None),
            "output_file": getattr(ns, "output_file", None),
            "format": getattr(ns, "format", None),
            "include_subnets": getattr(ns, "include_subnets", None),
            "include_default_vpcs": getattr(ns, "include_default_vpcs", None),
            "duplicates_only": getattr(ns, "duplicates_only", None),
            "regions": getattr(ns, "regions", None),
            "workers_region": getattr(ns, "workers_region", None),
            "workers_resource": getattr(ns, "workers_resource", None),
            "profile": getattr(ns, "profile", None),
            "region": getattr(ns, "region", None),
            "log_level": getattr(ns, "log_level", None),
            "json_logs": getattr(ns, "json_logs", None),
            "progress": getattr(ns, "progress", None),
        }
    )

    merged = _merge_dicts(base, _merge_dicts(file_cfg, _merge_dicts(env_cfg, cli_cfg)))

    # Normalize/construct types
    fmt = str(merged.get("format") or DEFAULT_FORMAT).lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {fmt}")
    regions_raw = merged.get("regions")
    regions: Optional[List[str]] = _split_regions(regions_raw) if regions_raw is not None else None
    profile = merged.get("profile")

    # default workers only when unset
    workers_region = int(DEFAULT_WORKERS_REGION if merged["workers_region"] is None else merged["workers_region"])
    workers_resource = int(
        DEFAULT_WORKERS_RESOURCE if merged["workers_resource"] is None else merged["workers_resource"]
    )
    if workers_region < 1 or workers_resource < 1:
        raise ValueError("Worker counts must be positive integers")

    cfg = RunConfig(
        data_file=Path(merged["data_file"]) if merged.get("data_file") else None,
        output_file=Path(merged["output_file"]) if merged.get("output_file") else None,
        format=fmt,
        include_subnets=bool(merged["include_subnets"]),
        include_default_vpcs=bool(merged["include_default_vpcs"]),
        duplicates_only=bool(merged["duplicates_only"]),
        regions=regions or None,
        workers_region=workers_region,
        workers_resource=workers_resource,
        profile=str(profile) if profile else None,
        region=str(merged.get("region") or DEFAULT_REGION),
        log_level=(merged.get("log_level") or "INFO").upper(),
        json_logs=bool(merged["json_logs"]),
        progress=bool(merged["progress"]),
    )
    return command, cfg


def dump_config(cfg: RunConfig) -> Dict[str, Any]:
    return {
        "data_file": str(cfg.data_file) if cfg.data_file else None,
        "output_file": str(cfg.output_file) if cfg.output_file else None,
        "format": cfg.format,
        "include_subnets": cfg.include_subnets,
        "include_default_vpcs": cfg.include_default_vpcs,
        "duplicates_only": cfg.duplicates_only,
        "regions": cfg.regions,
        "workers_region": cfg.workers_region,
        "workers_resource": cfg.workers_resource,
        "profile": cfg.profile,
        "region": cfg.region,
        "log_level": cfg.log_level,
        "json_logs": cfg.json_logs,
        "progress": cfg.progress,
    }
