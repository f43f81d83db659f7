"""
Budget snapshots - out-of-band record of what each labeled call cost.

One JSON object per line, appended to a flat file, so regressions in CPU,
footprint, or event size show up as a diff between runs. Recording never
affects the call: non-success results and results without simulation
metrics are skipped, and write or schema problems are logged, not raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..utils import utc_now_rfc3339
from .schemas import SchemaValidationError, SnapshotValidator

logger = logging.getLogger(__name__)


def snapshot_record(label: str, result: Any) -> Optional[dict[str, Any]]:
    """
    Build the metrics record for a successful call.

    Returns:
        The record, or None when the result is not a success or carries no
        simulation metrics
    """
    if not getattr(result, "ok", False):
        return None
    resources = getattr(result, "resources", None)
    if resources is None:
        return None

    return {
        "label": label,
        "recorded_at": utc_now_rfc3339(),
        "contract_id": result.contract_id,
        "method": result.method,
        "tx_hash": result.tx_hash,
        "cpu_insns": resources.cpu_insns,
        "mem_bytes": resources.mem_bytes,
        "instructions": resources.instructions,
        "read_bytes": resources.read_bytes,
        "write_bytes": resources.write_bytes,
        "read_entries": len(resources.read_only) + len(resources.read_write),
        "write_entries": len(resources.read_write),
        "events_bytes": resources.events_bytes,
        "min_resource_fee": resources.min_resource_fee,
    }


class BudgetRecorder:
    """
    Append-only NDJSON sink for budget snapshots.

    Args:
        path: Snapshot file; created on first write
        validator: Schema check applied to records before writing
    """

    def __init__(self, path: Path, validator: Optional[SnapshotValidator] = None) -> None:
        self.path = Path(path)
        self.validator = validator or SnapshotValidator()

    def record(self, label: str, result: Any) -> None:
        """Write a snapshot for ``result``. Never raises."""
        try:
            self._record(label, result)
        except SchemaValidationError as exc:
            logger.warning("budget snapshot %s rejected: %s", label, "; ".join(exc.errors))
        except OSError as exc:
            logger.warning("could not write budget snapshot %s to %s: %s", label, self.path, exc)
        except Exception as exc:
            logger.warning("budget snapshot %s skipped: %s", label, exc)

    def _record(self, label: str, result: Any) -> None:
        record = snapshot_record(label, result)
        if record is None:
            logger.debug("no budget snapshot for %s: no simulation metrics", label)
            return

        self.validator.validate(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, sort_keys=True) + "\n")
        logger.debug("budget snapshot %s written to %s", label, self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def load_snapshots(path: Path) -> list[dict[str, Any]]:
    """
    Read snapshots back, skipping lines that are not JSON objects.

    A missing file yields an empty list.
    """
    path = Path(path)
    if not path.exists():
        return []

    records = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("%s:%d is not valid JSON; skipped", path, lineno)
                continue
            if isinstance(record, dict):
                records.append(record)
    return records
