import io
import logging
import os
import re
import time
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from optipic.encoder import MIME_TYPES
from optipic.engine import encode
from optipic.request import build_request

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "optipic-export.zip"


@dataclass(frozen=True)
class BatchJob:
    filename: str
    data: bytes


@dataclass(frozen=True)
class JobResult:
    name: str
    input_name: str
    input_size: int
    output_size: int = 0
    mime_type: str = ""
    data: bytes = b""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchSummary:
    input_size: int
    output_size: int

    @property
    def ratio(self) -> float:
        return self.output_size / max(1, self.input_size)

    @property
    def savings_percent(self) -> float:
        return (1 - self.ratio) * 100


def output_name(filename: str, fmt: str) -> str:
    extension = "jpg" if fmt == "jpeg" else fmt
    base = re.sub(r"\.[^/.]+$", "", filename)
    return f"{base}.{extension}"


def _run_job(job: BatchJob, form: Mapping[str, Any], deadline: Optional[float]) -> JobResult:
    request = build_request(form, job.data, job.filename)
    name = output_name(job.filename, request.resolved_format)
    try:
        result = encode(request, deadline=deadline)
    except Exception as e:
        logger.exception("convert failed for %s", job.filename)
        return JobResult(name=name, input_name=job.filename, input_size=len(job.data), error=f"{type(e).__name__}: {e}")

    logger.info(
        "converted %s -> %s (%d -> %d bytes, q=%d)",
        job.filename, name, len(job.data), result.byte_length, result.quality,
    )
    return JobResult(
        name=name,
        input_name=job.filename,
        input_size=len(job.data),
        output_size=result.byte_length,
        mime_type=MIME_TYPES[result.format],
        data=result.data,
    )


def run_batch(
    jobs: Iterable[BatchJob],
    form: Mapping[str, Any],
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None,
) -> List[JobResult]:
    """Convert every job concurrently; results come back in input order.

    ``timeout`` (seconds) is turned into one deadline shared by all searches.
    A failing job is reported on its own result and never aborts the others.
    """
    jobs = list(jobs)
    if not jobs:
        return []
    deadline = time.monotonic() + timeout if timeout else None
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(_run_job, job, form, deadline) for job in jobs]
        return [future.result() for future in futures]


def summarize(results: Iterable[JobResult]) -> BatchSummary:
    done = [r for r in results if r.ok]
    return BatchSummary(
        input_size=sum(r.input_size for r in done),
        output_size=sum(r.output_size for r in done),
    )


def build_zip(results: Iterable[JobResult]) -> bytes:
    zip_buf = io.BytesIO()
    seen = set()
    with zipfile.ZipFile(zip_buf, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for result in results:
            if not result.ok:
                continue
            name = result.name
            base, ext = os.path.splitext(name)
            n = 1
            while name in seen:
                name = f"{base}-{n}{ext}"
                n += 1
            seen.add(name)
            zf.writestr(name, result.data)
    return zip_buf.getvalue()
