"""Decoder service that turns captured random.org JSON-RPC responses into typed JSONL records."""

import json
import logging
import signal
import sys
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, TextIO

from randomorg_wire.core.config import get_settings
from randomorg_wire.core.errors import FormatError, UnsupportedValueError
from randomorg_wire.core.logging import configure_logging
from randomorg_wire.core.responses import ResponseDecoder, to_json_value

_RECORD_TYPE = "decoded_response"


@dataclass(slots=True)
class DecodeStats:
    """Running counters for one decoder pass."""

    decoded: int = 0
    rejected: int = 0
    skipped: int = 0


class RecordWriter:
    """JSONL writer for decoded records; writes to stdout when no path is set."""

    def __init__(self, path: str = "") -> None:
        self.path = Path(path) if path else None
        self._file: TextIO | None = None
        self._owns_file = False

    def open(self) -> None:
        if self.path is None:
            self._file = sys.stdout
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.path.open("a", encoding="utf-8")
        self._owns_file = True

    def write(self, record: dict[str, Any]) -> None:
        if self._file is None:
            raise RuntimeError("record writer is not open")
        line = json.dumps(record, ensure_ascii=True, separators=(",", ":"))
        self._file.write(line + "\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is None:
            return
        if self._owns_file:
            self._file.close()
        self._file = None
        self._owns_file = False


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _build_record(payload: dict[str, Any], decoder: ResponseDecoder) -> dict[str, Any]:
    method = payload.get("method")
    decoded = decoder.decode_response(method, payload.get("result"))
    return {
        "type": _RECORD_TYPE,
        "id": to_json_value(payload.get("id")),
        "method": method,
        "result": to_json_value(decoded),
    }


def decode_stream(
    lines: Iterable[str],
    decoder: ResponseDecoder,
    writer: RecordWriter,
    logger: logging.Logger,
    allowed_methods: tuple[str, ...] = (),
    shutdown_event: threading.Event | None = None,
) -> DecodeStats:
    """Decode every captured response in ``lines`` and write the typed records."""

    stats = DecodeStats()
    allowed = set(allowed_methods)

    for line_no, raw_line in enumerate(lines, start=1):
        if shutdown_event is not None and shutdown_event.is_set():
            break

        line = raw_line.strip()
        if not line:
            continue

        try:
            payload = json.loads(line, parse_float=Decimal, parse_constant=_reject_constant)
        except ValueError:
            stats.rejected += 1
            logger.warning("decoder_invalid_json", extra={"line": line_no})
            continue
        if not isinstance(payload, dict):
            stats.rejected += 1
            logger.warning("decoder_invalid_record", extra={"line": line_no})
            continue

        method = payload.get("method")
        if allowed and isinstance(method, str) and method not in allowed:
            stats.skipped += 1
            continue

        try:
            record = _build_record(payload, decoder)
        except FormatError as exc:
            stats.rejected += 1
            logger.warning(
                "decoder_response_rejected",
                extra={"line": line_no, "method": method, "error": exc.to_dict()},
            )
            continue
        except UnsupportedValueError as exc:
            stats.rejected += 1
            logger.error(
                "decoder_response_unsupported",
                extra={"line": line_no, "method": method, "error": exc.to_dict()},
            )
            continue

        writer.write(record)
        stats.decoded += 1
        logger.debug("decoder_response_decoded", extra={"line": line_no, "method": method})

    return stats


def _request_shutdown(shutdown_event: threading.Event, logger: logging.Logger, signal_name: str) -> None:
    if shutdown_event.is_set():
        return
    logger.info("decoder_shutdown_signal", extra={"signal": signal_name})
    shutdown_event.set()


def _install_signal_handlers(shutdown_event: threading.Event, logger: logging.Logger) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal_name = sig.name
        signal.signal(
            sig,
            lambda *_args, signal_name=signal_name: _request_shutdown(
                shutdown_event,
                logger,
                signal_name,
            ),
        )


def main() -> int:
    """Decode the configured input once and report whether every response decoded."""

    settings = get_settings()
    # Records go to stdout by default, so logs move to stderr in that case.
    configure_logging(
        settings.LOG_LEVEL,
        stream=sys.stderr if not settings.DECODER_OUTPUT_PATH else None,
    )
    logger = logging.getLogger(__name__)
    shutdown_event = threading.Event()

    try:
        decoder = ResponseDecoder(settings.wire_parser())
    except ValueError as exc:
        logger.error(
            "decoder_invalid_fraction_digits",
            extra={"value": settings.WIRE_FRACTION_DIGITS, "error": str(exc)},
        )
        return 1

    writer = RecordWriter(settings.DECODER_OUTPUT_PATH)
    try:
        writer.open()
    except OSError as exc:
        logger.error(
            "decoder_output_path_error",
            extra={"path": settings.DECODER_OUTPUT_PATH, "error": str(exc)},
        )
        return 1

    _install_signal_handlers(shutdown_event, logger)
    logger.info(
        "decoder_startup",
        extra={
            "input_path": settings.DECODER_INPUT_PATH or "<stdin>",
            "output_path": settings.DECODER_OUTPUT_PATH or "<stdout>",
            "methods": list(settings.decoder_methods()),
            "parser": repr(decoder.parser),
        },
    )

    try:
        if settings.DECODER_INPUT_PATH:
            with Path(settings.DECODER_INPUT_PATH).open("r", encoding="utf-8", errors="replace") as file_obj:
                stats = decode_stream(
                    file_obj,
                    decoder=decoder,
                    writer=writer,
                    logger=logger,
                    allowed_methods=settings.decoder_methods(),
                    shutdown_event=shutdown_event,
                )
        else:
            # undecodable bytes become U+FFFD instead of aborting the read
            sys.stdin.reconfigure(encoding="utf-8", errors="replace")
            stats = decode_stream(
                sys.stdin,
                decoder=decoder,
                writer=writer,
                logger=logger,
                allowed_methods=settings.decoder_methods(),
                shutdown_event=shutdown_event,
            )
    except OSError as exc:
        logger.error(
            "decoder_input_read_failed",
            extra={"path": settings.DECODER_INPUT_PATH, "error": str(exc)},
        )
        return 1
    finally:
        writer.close()

    logger.info(
        "decoder_shutdown",
        extra={"decoded": stats.decoded, "rejected": stats.rejected, "skipped": stats.skipped},
    )
    return 1 if stats.rejected else 0


if __name__ == "__main__":
    raise SystemExit(main())
