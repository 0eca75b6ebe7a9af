from __future__ import annotations

from typing import Optional, Sequence

from clients.github.codec import encode_bytes
from clients.github.inputs import normalize_message
from config import MAX_UPLOAD_BYTES
from core.errors import RepoManagerError, ValidationError
from core.log import get_logger
from core.models import Notification, UploadFailure, UploadFile, UploadReport
from core.notifications import success, warning
from core.paths import format_bytes, join_path
from session.session import Session
from workflows.files import refresh_after_change

logger = get_logger("workflows")


async def upload_files(
    session: Session,
    files: Sequence[UploadFile],
    message: Optional[str] = None,
    *,
    max_total_bytes: int = MAX_UPLOAD_BYTES,
) -> UploadReport:
    """Upload local files into the current folder, one request at a time.

    The batch is rejected up front if it is empty or larger than
    `max_total_bytes` in total. After that each file is independent. It is
    read only when its turn comes and an existing file is overwritten using
    its current sha. A failure, including an unreadable local file, is
    recorded in the report without stopping the remaining files.
    """
    if not files:
        raise ValidationError("No files selected")

    total = sum(f.size for f in files)
    if total > max_total_bytes:
        raise ValidationError(f"Total file size exceeds {format_bytes(max_total_bytes)} limit")

    client = session.client()
    base_message = normalize_message(message, "Upload files")
    folder = session.current_path
    report = UploadReport()

    for item in files:
        try:
            path = join_path(folder, item.name)
            data = await item.read()
            sha = await client.find_sha(path)
            await client.upload_binary(
                path,
                encode_bytes(data),
                f"{base_message}: {item.name}",
                existing_sha=sha,
                check_existing=False,
            )
            report.succeeded.append(item.name)
        except RepoManagerError as e:
            logger.info("Upload of %s failed: %s", item.name, e)
            report.failed.append(UploadFailure(name=item.name, message=str(e)))

    logger.info("Upload finished: %d succeeded, %d failed", report.success_count, report.failure_count)
    if report.success_count:
        await refresh_after_change(session)
    return report


def upload_notification(report: UploadReport) -> Notification:
    if report.failure_count == 0:
        return success(f"Successfully uploaded {report.success_count} files")
    if report.success_count > 0:
        return warning(f"Uploaded {report.success_count} files, {report.failure_count} failed")
    return Notification(title="Error", message="Failed to upload any files", severity="error")
