"""Manual multipart/form-data body assembly.

The boundary is generated once and carried on the returned ``MultipartBody``
so the ``Content-Type`` header and the encoded body always agree.
"""

import uuid
from dataclasses import dataclass
from typing import Mapping

from .constants import MULTIPART_BOUNDARY_PREFIX, MULTIPART_FILE_FIELD
from .http_headers import CONTENT_TYPE_MULTIPART

CRLF = b"\r\n"


@dataclass(frozen=True)
class MultipartBody:
    """An encoded multipart body and the boundary it was encoded with."""

    boundary: str
    body: bytes

    @property
    def content_type(self) -> str:
        """Value for the ``Content-Type`` header."""
        return f"{CONTENT_TYPE_MULTIPART}; boundary={self.boundary}"


def generate_boundary() -> str:
    """Generate a unique boundary token."""
    return f"{MULTIPART_BOUNDARY_PREFIX}{str(uuid.uuid4()).upper()}"


def encode_multipart(
    file_data: bytes,
    file_name: str,
    mime_type: str,
    parameters: Mapping[str, str] | None = None,
    boundary: str | None = None,
) -> MultipartBody:
    """
    Encode a file and optional form fields as multipart/form-data.

    Each field becomes one part in mapping order; the file is always the
    last part, under the form name ``file``.

    Args:
        file_data: Raw file bytes
        file_name: File name reported in the ``filename`` parameter
        mime_type: Content type of the file part
        parameters: Additional string form fields
        boundary: Boundary to use; generated when omitted

    Returns:
        MultipartBody carrying the boundary and the encoded bytes.
    """
    if boundary is None:
        boundary = generate_boundary()

    delimiter = f"--{boundary}".encode("utf-8")
    parts: list[bytes] = []

    for key, value in (parameters or {}).items():
        parts.append(delimiter + CRLF)
        parts.append(f'Content-Disposition: form-data; name="{key}"'.encode("utf-8") + CRLF + CRLF)
        parts.append(str(value).encode("utf-8") + CRLF)

    parts.append(delimiter + CRLF)
    parts.append(
        f'Content-Disposition: form-data; name="{MULTIPART_FILE_FIELD}"; filename="{file_name}"'.encode("utf-8")
        + CRLF
    )
    parts.append(f"Content-Type: {mime_type}".encode("utf-8") + CRLF + CRLF)
    parts.append(bytes(file_data) + CRLF)
    parts.append(delimiter + b"--" + CRLF)

    return MultipartBody(boundary=boundary, body=b"".join(parts))
