from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import threading
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from dotenv import load_dotenv

from fieldrecon.app import (
    add_fields,
    analyze_third_party,
    catalog_fields,
    completeness_stats,
    import_legacy_export,
    merge_fields,
    merge_fields_bulk,
    migrate_all,
    migrate_third_party,
    missing_by_template,
    required_fields,
    suggest_fields,
    validate_template,
)
from fieldrecon.config import ConfigurationError, configure_logging
from fieldrecon.domain.errors import FieldReconciliationError, NotFoundError, ValidationError
from fieldrecon.domain.fields import FieldInput

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

COMPANY_ENV = "FIELDRECON_COMPANY_ID"
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_NOT_FOUND = 3

_CANCEL = threading.Event()


class _Serializable(Protocol):
    def to_dict(self) -> dict[str, object]: ...


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile third-party fields with templates")
    parser.add_argument(
        "--company",
        type=str,
        default=None,
        help=f"Company (tenant) id; defaults to ${COMPANY_ENV}",
    )
    parser.add_argument(
        "--user",
        type=str,
        default=None,
        help="Recorded as the author of any change",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Completion analysis of one third party")
    analyze.add_argument("third_party_id", type=str)

    required = subparsers.add_parser(
        "required-fields", help="Requirements aggregated over a type's templates"
    )
    required.add_argument("third_party_type", type=str)

    validate = subparsers.add_parser(
        "validate-template", help="Check one third party against one template"
    )
    validate.add_argument("third_party_id", type=str)
    validate.add_argument("template_id", type=str)

    missing = subparsers.add_parser(
        "missing-by-template", help="Fields each active template still needs from a record"
    )
    missing.add_argument("third_party_id", type=str)
    missing.add_argument("--template", dest="template_id", default=None, help="Only this template")

    migrate = subparsers.add_parser("migrate", help="Rename one record's keys to canonical form")
    migrate.add_argument("third_party_id", type=str)
    _add_migration_flags(migrate)

    migrate_everything = subparsers.add_parser(
        "migrate-all", help="Rename keys to canonical form on every active record"
    )
    migrate_everything.add_argument(
        "--type", dest="third_party_type", type=str, help="Only records of this type"
    )
    _add_migration_flags(migrate_everything)

    suggest = subparsers.add_parser("suggest", help="Fields common among same-type records")
    suggest.add_argument("third_party_id", type=str)

    catalog = subparsers.add_parser("catalog", help="Catalog fields usual for the record's type")
    catalog.add_argument("third_party_id", type=str)

    add = subparsers.add_parser("add-fields", help="Add or update fields on one record")
    add.add_argument("third_party_id", type=str)
    add.add_argument(
        "--field",
        dest="fields",
        action="append",
        required=True,
        metavar="NAME=VALUE",
        help="Field to set (repeatable); the name is normalized",
    )

    merge = subparsers.add_parser("merge", help="Merge several keys of one record")
    merge.add_argument("third_party_id", type=str)
    merge.add_argument("--keys", nargs="+", required=True, help="Existing keys to merge")
    merge.add_argument("--target", required=True, help="Name of the merged field")
    merge.add_argument("--value", default=None, help="Value for the merged field")
    merge.add_argument(
        "--keep-originals", action="store_true", help="Do not delete the merged keys"
    )

    merge_bulk = subparsers.add_parser("merge-bulk", help="Merge keys on every record of a type")
    merge_bulk.add_argument("third_party_type", type=str)
    merge_bulk.add_argument("--names", nargs="+", required=True, help="Field names to merge")
    merge_bulk.add_argument("--target", required=True, help="Name of the merged field")
    merge_bulk.add_argument(
        "--keep-originals", action="store_true", help="Do not delete the merged keys"
    )

    subparsers.add_parser("stats", help="Company-wide completion statistics")

    import_export = subparsers.add_parser("import", help="Load a legacy JSON export")
    import_export.add_argument("path", type=Path)

    return parser.parse_args(list(argv))


def _add_migration_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run", action="store_true", help="Report the renames without saving them"
    )
    parser.add_argument(
        "--aliases", action="store_true", help="Also map legacy labels through the alias table"
    )


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _parse_field(value: str) -> FieldInput:
    name, separator, raw = value.partition("=")
    if not separator:
        raise ValueError(f"Expected NAME=VALUE, got {value!r}")
    return FieldInput(name=name, value=raw)


def _resolve_company(args: argparse.Namespace) -> str:
    company = args.company or os.getenv(COMPANY_ENV)
    if not company or not company.strip():
        raise ValueError(f"Missing --company (or set {COMPANY_ENV})")
    return company.strip()


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n")


def _emit_error(error: FieldReconciliationError | ConfigurationError) -> None:
    payload = (
        error.to_dict()
        if isinstance(error, FieldReconciliationError)
        else {"error": type(error).__name__, "message": str(error)}
    )
    sys.stderr.write(json.dumps(payload, ensure_ascii=False) + "\n")


def _progress(done: int, total: int) -> None:
    log.debug("Processed %d/%d records", done, total)


def _dispatch(args: argparse.Namespace, company_id: str) -> object:  # noqa: C901, PLR0911, PLR0912
    command = args.command
    if command == "analyze":
        return analyze_third_party(_parse_uuid(args.third_party_id), company_id).to_dict()
    if command == "required-fields":
        return [req.to_dict() for req in required_fields(args.third_party_type, company_id)]
    if command == "validate-template":
        return validate_template(
            _parse_uuid(args.third_party_id), _parse_uuid(args.template_id), company_id
        ).to_dict()
    if command == "missing-by-template":
        return missing_by_template(
            _parse_uuid(args.third_party_id),
            company_id,
            template_id=_parse_uuid(args.template_id) if args.template_id else None,
        ).to_dict()
    if command == "migrate":
        return migrate_third_party(
            _parse_uuid(args.third_party_id),
            company_id,
            dry_run=args.dry_run,
            apply_aliases=args.aliases,
            updated_by=args.user,
        ).to_dict()
    if command == "migrate-all":
        return migrate_all(
            company_id,
            third_party_type=args.third_party_type,
            dry_run=args.dry_run,
            apply_aliases=args.aliases,
            updated_by=args.user,
            progress=_progress,
            should_cancel=_CANCEL.is_set,
        ).to_dict()
    if command == "suggest":
        return _as_list(suggest_fields(_parse_uuid(args.third_party_id), company_id))
    if command == "catalog":
        return _as_list(catalog_fields(_parse_uuid(args.third_party_id), company_id))
    if command == "add-fields":
        fields = [_parse_field(value) for value in args.fields]
        return add_fields(
            _parse_uuid(args.third_party_id), company_id, fields, updated_by=args.user
        ).to_dict()
    if command == "merge":
        return merge_fields(
            _parse_uuid(args.third_party_id),
            company_id,
            args.keys,
            args.target,
            target_value=args.value,
            remove_originals=not args.keep_originals,
            updated_by=args.user,
        ).to_dict()
    if command == "merge-bulk":
        return merge_fields_bulk(
            company_id,
            args.third_party_type,
            args.names,
            args.target,
            remove_originals=not args.keep_originals,
            updated_by=args.user,
            progress=_progress,
            should_cancel=_CANCEL.is_set,
        ).to_dict()
    if command == "stats":
        return completeness_stats(company_id).to_dict()
    if command == "import":
        return import_legacy_export(args.path, company_id).to_dict()
    raise ValueError(f"Unsupported command: {command}")


def _as_list(items: Sequence[_Serializable]) -> list[dict[str, object]]:
    return [item.to_dict() for item in items]


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        company_id = _resolve_company(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_INVALID)

    try:
        _emit(_dispatch(parsed_args, company_id))
    except ValidationError as exc:
        _emit_error(exc)
        sys.exit(EXIT_INVALID)
    except NotFoundError as exc:
        _emit_error(exc)
        sys.exit(EXIT_NOT_FOUND)
    except (FieldReconciliationError, ConfigurationError) as exc:
        _emit_error(exc)
        sys.exit(EXIT_FAILURE)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_INVALID)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FAILURE)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """First Ctrl+C stops cohort commands after the current record; a second one exits."""
    if _CANCEL.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(0)
    log.info("Cancelling after the current record (Ctrl+C again to quit)")
    _CANCEL.set()


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
