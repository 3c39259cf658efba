"""
client.py

Google Shared Drive asset source.

Resolves manifest folder/file names to Drive files and hands back either a
seekable byte stream (videos) or a loaded buffer (images, JSON manifests).
Failures surface as plain exceptions; the pipeline does not retry them.
"""

from __future__ import annotations

import io
import json
import tempfile
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Optional

from googleapiclient.http import MediaIoBaseDownload

from logger import get_logger

logger = get_logger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# Videos larger than this spill from memory to a temp file while buffered
_SPOOL_MAX_BYTES = 64 * 1024 * 1024


class AssetNotFoundError(LookupError):
    pass


@dataclass
class AssetStream:
    stream: BinaryIO
    size: int
    mime_type: str
    file_id: str

    def close(self) -> None:
        self.stream.close()


@dataclass(frozen=True)
class AssetBuffer:
    data: bytes
    size: int
    mime_type: str


def _quote(value: str) -> str:
    # Drive query string literals escape backslash and single quote.
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveAssetSource:
    def __init__(self, drive: Any, shared_drive_id: str):
        self._drive = drive
        self._shared_drive_id = shared_drive_id

    # --------------------------------------------------------
    # Lookup
    # --------------------------------------------------------

    def _find_one(self, query: str, fields: str) -> Optional[Dict[str, Any]]:
        resp = (
            self._drive.files()
            .list(
                q=query,
                driveId=self._shared_drive_id,
                corpora="drive",
                includeItemsFromAllDrives=True,
                supportsAllDrives=True,
                fields=f"files({fields})",
                pageSize=1,
            )
            .execute()
        )
        files = resp.get("files") or []
        return files[0] if files else None

    def find_folder(self, folder_name: str) -> Dict[str, Any]:
        folder = self._find_one(
            f"name = '{_quote(folder_name)}' and mimeType = '{FOLDER_MIME_TYPE}' "
            "and trashed = false",
            "id, name",
        )
        if not folder:
            raise AssetNotFoundError(f'Folder "{folder_name}" not found in Shared Drive')
        return folder

    def find_file(self, filename: str, folder_id: Optional[str] = None) -> Dict[str, Any]:
        query = f"name = '{_quote(filename)}' and trashed = false"
        if folder_id:
            query += f" and '{_quote(folder_id)}' in parents"

        found = self._find_one(query, "id, name, size, mimeType")
        if not found:
            where = f'folder "{folder_id}"' if folder_id else "Shared Drive"
            raise AssetNotFoundError(f'File "{filename}" not found in {where}')
        return found

    # --------------------------------------------------------
    # Download
    # --------------------------------------------------------

    def _download_into(self, file_id: str, sink: BinaryIO) -> None:
        request = self._drive.files().get_media(fileId=file_id, supportsAllDrives=True)
        downloader = MediaIoBaseDownload(sink, request)
        done = False
        while not done:
            _status, done = downloader.next_chunk()
        sink.seek(0)

    def load_json(self, filename: str) -> Any:
        logger.info(f"Loading {filename} from Shared Drive")
        meta = self.find_file(filename)
        buf = io.BytesIO()
        self._download_into(meta["id"], buf)
        return json.loads(buf.getvalue().decode("utf-8"))

    def open_stream(self, folder_name: str, filename: str) -> AssetStream:
        """
        Buffer a Drive file into a seekable spooled temp file.

        The caller owns the returned stream and must close it.
        """
        folder = self.find_folder(folder_name)
        meta = self.find_file(filename, folder["id"])

        logger.debug(
            f"Streaming {filename} from Drive (file={meta['id']}, size={meta.get('size')})"
        )

        sink = tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_BYTES)
        try:
            self._download_into(meta["id"], sink)
        except Exception:
            sink.close()
            raise

        return AssetStream(
            stream=sink,
            size=int(meta.get("size") or 0),
            mime_type=meta.get("mimeType") or "application/octet-stream",
            file_id=meta["id"],
        )

    def load_buffer(self, folder_name: str, filename: str) -> AssetBuffer:
        folder = self.find_folder(folder_name)
        meta = self.find_file(filename, folder["id"])

        buf = io.BytesIO()
        self._download_into(meta["id"], buf)
        data = buf.getvalue()
        return AssetBuffer(
            data=data,
            size=len(data),
            mime_type=meta.get("mimeType") or "application/octet-stream",
        )
