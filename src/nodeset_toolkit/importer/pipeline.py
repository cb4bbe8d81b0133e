"""
Module: importer.pipeline

Purpose:
    Main orchestrator for importing a batch of OPC UA nodeset files. Runs
    every file through size/format gating, reading, the missing-dependency
    gate, validation, duplicate detection, parsing, metadata extraction and
    namespace conflict resolution, and records what happened to each file.

Key Functions:
    - import_batch(): Main entry point
    - dispatch_result(): Hand a BatchResult to loaded/error callbacks
    - read_with_progress(): Chunked read of one file with progress

Key Classes:
    - RawFile: A named byte source with a declared size
    - Accepted / Skipped / BatchAborted: Per-file outcomes
    - BatchResult: Ordered outcomes of one batch

Failure policy:
    - Size, format and missing-dependency failures abort the batch before
      any file is processed.
    - Validation, duplicate and rejected-conflict failures skip only the
      file at hand.
    - A parse failure aborts the rest of the batch; files accepted before
      it stay accepted.

Dependencies:
    - lxml (through importer.validation / importer.parser)

Used By:
    - gui.controller: Qt front end
    - scripts/import_nodesets.py: Command-line import
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, List, Optional, Sequence, Union

from nodeset_toolkit.core.models import NodesetMetadata, NodesetModel
from .checksum import detect_duplicate, generate_checksum
from .config import MIB, ImportConfig
from .conflicts import ConflictAction, detect_namespace_conflicts, resolve_namespace_conflict
from .dependencies import get_required_models
from .errors import ErrorCode, NodesetImportError, ParseError, format_message
from .history import RecentFileEntry
from .metadata import extract_metadata
from .notifications import Notification, Severity
from .parser import parse_nodeset_file
from .session import ImportSession, UploadState
from .timing import TimingLog, timed_phase
from .validation import ValidationResult, validate_xml

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024

STAGE_READING = "Reading file..."
STAGE_VALIDATING = "Validating XML..."
STAGE_CHECKSUM = "Generating checksum..."
STAGE_PARSING = "Parsing nodeset..."
STAGE_COMPLETED = "Completed"

Validator = Callable[[str], ValidationResult]
Parser = Callable[[str, str, Sequence[str]], NodesetModel]


@dataclass(frozen=True)
class RawFile:
    """
    A file handed to the importer.

    ``size`` is the size declared by the caller (the browser or the file
    system) and is what the size gate checks; the content is only read
    once every file in the batch has passed the gate.
    """
    name: str
    size: int
    source: Union[bytes, Path]

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> RawFile:
        return cls(name=name, size=len(data), source=bytes(data))

    @classmethod
    def from_text(cls, name: str, text: str) -> RawFile:
        return cls.from_bytes(name, text.encode("utf-8"))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> RawFile:
        """
        Describe a file on disk. A path that cannot be stat'ed gets size 0;
        the failure is reported as PARSE_ERROR when the batch reads it.
        """
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            size = 0
        return cls(name=path.name, size=size, source=path)

    def open(self) -> BinaryIO:
        if isinstance(self.source, Path):
            return self.source.open("rb")
        return io.BytesIO(self.source)


def read_with_progress(raw: RawFile, on_progress: Callable[[int], None]) -> str:
    """
    Read ``raw`` in chunks, reporting percent complete after each one.

    Content is decoded as UTF-8; a leading byte order mark is dropped.

    Raises:
        UnicodeDecodeError: If the content is not UTF-8
        OSError: If a path-backed file cannot be read
    """
    chunks: List[bytes] = []
    loaded = 0
    with raw.open() as fh:
        while True:
            chunk = fh.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
            loaded += len(chunk)
            if raw.size > 0:
                on_progress(min(100, round(loaded / raw.size * 100)))
    if raw.size <= 0:
        on_progress(100)
    return b"".join(chunks).decode("utf-8-sig")


# ─────────────────────────────────────────────────────────────────────────────
# Outcomes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Accepted:
    """File accepted. ``conflict`` is set when it was accepted despite a namespace conflict."""
    file_name: str
    metadata: NodesetMetadata
    model: NodesetModel
    conflict: Optional[NodesetImportError] = None


@dataclass(frozen=True)
class Skipped:
    file_name: str
    error: NodesetImportError


@dataclass(frozen=True)
class BatchAborted:
    error: NodesetImportError


FileOutcome = Union[Accepted, Skipped, BatchAborted]


@dataclass
class BatchResult:
    """
    Ordered outcomes of one import_batch() call.

    At most one BatchAborted is present and it is always last.
    """
    outcomes: List[FileOutcome] = field(default_factory=list)
    timings: TimingLog = field(default_factory=TimingLog)

    @property
    def accepted(self) -> List[Accepted]:
        return [o for o in self.outcomes if isinstance(o, Accepted)]

    @property
    def skipped(self) -> List[Skipped]:
        return [o for o in self.outcomes if isinstance(o, Skipped)]

    @property
    def aborted(self) -> Optional[BatchAborted]:
        return next((o for o in self.outcomes if isinstance(o, BatchAborted)), None)

    @property
    def errors(self) -> List[NodesetImportError]:
        """Every error in outcome order, including conflicts of accepted files."""
        errors: List[NodesetImportError] = []
        for outcome in self.outcomes:
            if isinstance(outcome, Accepted):
                if outcome.conflict is not None:
                    errors.append(outcome.conflict)
            else:
                errors.append(outcome.error)
        return errors

    @property
    def succeeded(self) -> bool:
        return bool(self.accepted) and self.aborted is None


# ─────────────────────────────────────────────────────────────────────────────
# Orchestration
# ─────────────────────────────────────────────────────────────────────────────

def import_batch(
    files: Iterable[RawFile],
    session: ImportSession,
    *,
    validator: Validator = validate_xml,
    parser: Parser = parse_nodeset_file,
) -> BatchResult:
    """
    Import a batch of nodeset files into ``session``.

    Args:
        files: Files in selection order
        session: Session that receives accepted nodesets, notifications,
            progress, upload state and history
        validator: Well-formedness / structure check of the raw XML
        parser: Turns raw XML into a NodesetModel; receives every text of
            the batch to resolve cross-file references

    Returns:
        BatchResult with one outcome per processed file, in order

    Raises:
        ImportInProgressError: If the session is already importing

    Example:
        >>> session = ImportSession(ImportConfig())
        >>> result = import_batch([RawFile.from_path("Boiler.NodeSet2.xml")], session)
        >>> [a.metadata.node_count for a in result.accepted]
    """
    files = list(files)
    result = BatchResult()
    if not files:
        return result

    with session.importing():
        config = session.config
        session.required_models = []
        session.set_upload_state(UploadState.LOADING)
        try:
            _run_batch(files, session, config, result, validator, parser)
        except ParseError as e:
            logger.error(f"Parse failed, aborting batch: {e}", extra={"file_name": e.file_name, "line": e.line})
            _abort(session, result, _parse_error(str(e), e.file_name or None), "parse-error")
        except Exception as e:
            logger.exception(f"Unexpected import failure, aborting batch: {e}")
            _abort(session, result, _parse_error(str(e) or type(e).__name__, None), "parse-error")
        finally:
            session.clear_progress()
            if result.aborted is not None or not result.accepted:
                session.set_upload_state(UploadState.UPLOAD_FAILED)
            session.schedule_reset(config.reset_delay_s)

    logger.info(
        f"Import batch finished: {len(result.accepted)} accepted, {len(result.skipped)} skipped"
        f"{', aborted' if result.aborted else ''}",
        extra={
            "file_count": len(files),
            "accepted": len(result.accepted),
            "skipped": len(result.skipped),
            "aborted": result.aborted is not None,
        },
    )
    logger.debug(result.timings.summary())
    return result


def _run_batch(
    files: List[RawFile],
    session: ImportSession,
    config: ImportConfig,
    result: BatchResult,
    validator: Validator,
    parser: Parser,
) -> None:
    # Gate the whole batch before reading anything
    max_size = config.effective_max_file_size
    for raw in files:
        if raw.size > max_size:
            error = NodesetImportError(
                code=ErrorCode.FILE_TOO_LARGE,
                message=format_message(ErrorCode.FILE_TOO_LARGE, size=f"{max_size / MIB:.1f}"),
                file_name=raw.name,
                details=f"Size: {raw.size} bytes",
            )
            _abort(session, result, error, f"{raw.name}-size")
            return
        if not config.accepts_file_name(raw.name):
            expected = ", ".join(config.accepted_formats)
            error = NodesetImportError(
                code=ErrorCode.INVALID_FORMAT,
                message=format_message(ErrorCode.INVALID_FORMAT, details=f"expected {expected} file"),
                file_name=raw.name,
            )
            _abort(session, result, error, f"{raw.name}-format")
            return

    contents: List[str] = []
    for raw in files:
        contents.append(
            read_with_progress(raw, lambda value, name=raw.name: session.set_progress(name, value, STAGE_READING))
        )

    # A lone file must not depend on anything outside the base namespace
    if len(files) == 1:
        required = get_required_models(contents[0])
        if required:
            session.required_models = required
            joined = ", ".join(required)
            error = NodesetImportError(
                code=ErrorCode.MISSING_ELEMENTS,
                message=format_message(ErrorCode.MISSING_ELEMENTS, elements=joined),
                file_name=files[0].name,
                details=joined,
            )
            _abort(session, result, error, f"{files[0].name}-required", Severity.WARNING)
            return

    for raw, text in zip(files, contents):
        _import_file(raw, text, contents, session, config, result, validator, parser)


def _import_file(
    raw: RawFile,
    text: str,
    contents: Sequence[str],
    session: ImportSession,
    config: ImportConfig,
    result: BatchResult,
    validator: Validator,
    parser: Parser,
) -> None:
    name = raw.name

    session.set_progress(name, 0, STAGE_VALIDATING)
    with timed_phase(result.timings, "validate", name):
        validation = validator(text)
    if not validation.is_valid:
        details = ", ".join(validation.messages)
        error = NodesetImportError(
            code=ErrorCode.INVALID_FORMAT,
            message=format_message(ErrorCode.INVALID_FORMAT, details=details),
            file_name=name,
            details=details,
        )
        _skip(session, result, error, f"{name}-invalid", Severity.ERROR)
        return

    session.set_progress(name, 30, STAGE_CHECKSUM)
    with timed_phase(result.timings, "checksum", name):
        checksum = generate_checksum(text)
    if detect_duplicate(checksum, session.loaded_checksums):
        error = NodesetImportError(
            code=ErrorCode.DUPLICATE,
            message=format_message(ErrorCode.DUPLICATE),
            file_name=name,
        )
        _skip(session, result, error, f"{name}-duplicate", Severity.WARNING)
        return

    session.set_progress(name, 60, STAGE_PARSING)
    with timed_phase(result.timings, "parse", name):
        model = parser(text, name, contents)
    metadata = extract_metadata(text, model, name, raw.size, checksum)

    conflict_error: Optional[NodesetImportError] = None
    conflicts = detect_namespace_conflicts(metadata.namespaces, session.loaded_namespaces)
    if conflicts:
        joined = ", ".join(conflicts)
        conflict_error = NodesetImportError(
            code=ErrorCode.NAMESPACE_CONFLICT,
            message=format_message(ErrorCode.NAMESPACE_CONFLICT, elements=joined),
            file_name=name,
            details=joined,
        )
        resolution = resolve_namespace_conflict(config.namespace_conflict_strategy, metadata, conflicts)
        logger.warning(
            f"Namespace conflict in {name}: {joined} ({resolution.action.value})",
            extra={"file_name": name, "conflicts": conflicts, "action": resolution.action.value},
        )
        if resolution.action == ConflictAction.REJECT:
            _skip(session, result, conflict_error, f"{name}-namespace-reject", Severity.ERROR)
            return
        if resolution.action == ConflictAction.RENAME and resolution.updated_metadata is not None:
            metadata = resolution.updated_metadata
            session.notify(Notification(
                f"{name}-namespace-rename", Severity.WARNING, f"{conflict_error.message} (renamed)", joined,
            ))
        else:
            session.notify(Notification(f"{name}-namespace", Severity.WARNING, conflict_error.message, joined))

    session.set_progress(name, 100, STAGE_COMPLETED)
    session.register(model, metadata)
    session.notify(Notification(
        f"{name}-success", Severity.SUCCESS, f"Loaded '{name}' with {metadata.node_count} nodes",
    ))
    session.set_upload_state(UploadState.UPLOAD_SUCCESSED)
    session.record_recent(RecentFileEntry.now(metadata.id, name, raw.size))
    result.outcomes.append(Accepted(name, metadata, model, conflict_error))
    logger.info(
        f"Loaded {name}: {metadata.node_count} nodes",
        extra={"file_name": name, "node_count": metadata.node_count, "nodeset_id": metadata.id},
    )


def _parse_error(message: str, file_name: Optional[str]) -> NodesetImportError:
    return NodesetImportError(
        code=ErrorCode.PARSE_ERROR,
        message=format_message(ErrorCode.PARSE_ERROR, details=message),
        file_name=file_name,
        details=message,
    )


def _skip(
    session: ImportSession,
    result: BatchResult,
    error: NodesetImportError,
    notification_id: str,
    severity: Severity,
) -> None:
    session.notify(Notification(notification_id, severity, error.message, error.details))
    result.outcomes.append(Skipped(error.file_name or "", error))
    logger.warning(
        f"Skipped {error.file_name}: {error.message}",
        extra={"file_name": error.file_name, "code": error.code.value},
    )


def _abort(
    session: ImportSession,
    result: BatchResult,
    error: NodesetImportError,
    notification_id: str,
    severity: Severity = Severity.ERROR,
) -> None:
    session.notify(Notification(notification_id, severity, error.message, error.details))
    result.outcomes.append(BatchAborted(error))
    logger.warning(
        f"Import batch aborted: {error.message}",
        extra={"file_name": error.file_name, "code": error.code.value},
    )


def dispatch_result(
    result: BatchResult,
    on_nodeset_loaded: Callable[[NodesetModel, NodesetMetadata], object],
    on_error: Callable[[NodesetImportError], object],
) -> None:
    """
    Replay a batch result into a caller's callbacks, in outcome order.

    For a file accepted despite a namespace conflict the conflict error is
    reported before the file is handed over.
    """
    for outcome in result.outcomes:
        if isinstance(outcome, Accepted):
            if outcome.conflict is not None:
                on_error(outcome.conflict)
            on_nodeset_loaded(outcome.model, outcome.metadata)
        else:
            on_error(outcome.error)
