# Copyright 2026 Marc-Antoine Desjardins
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Remote camera repository.

This module contains the CameraRepository interface consumed by the camera
store and its HTTP implementation on top of QtNetwork. All calls are
asynchronous and fire-and-forget: replies are handled on the Qt event loop
and failures are only logged and signalled.
"""

from __future__ import annotations

import json
import logging
import mimetypes
import os
from typing import Any, Callable
from urllib.parse import quote

from PySide6 import QtCore, QtNetwork

logger = logging.getLogger(__name__)


def api_url(api_base: str, *parts: str) -> str:
    """Build an API URL from its path segments.

    Args:
        api_base: Server root, e.g. 'http://localhost:8080'.
        *parts: Path segments below /api, quoted individually.

    Returns:
        Absolute URL string.
    """
    path = "/".join(quote(str(part), safe="") for part in parts)
    return f"{api_base.rstrip('/')}/api/{path}"


def encode_json(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode('utf-8')


def decode_json(raw: bytes) -> Any:
    """Decode a reply body, returning None for an empty body."""
    text = raw.decode('utf-8').strip()
    return json.loads(text) if text else None


class CameraRepository(QtCore.QObject):
    """Interface of the remote collaborator persisting cameras.

    Signals:
        request_failed: Emitted when a remote call fails (description: str).
    """

    request_failed = QtCore.Signal(str)

    def create_camera(self, project_id: str, payload: dict, on_created: Callable[[str], None]) -> None:
        """Create a camera remotely and report the assigned identifier."""
        raise NotImplementedError

    def update_camera(self, remote_id: str, payload: dict) -> None:
        raise NotImplementedError

    def delete_camera(self, remote_id: str) -> None:
        raise NotImplementedError

    def update_config(self, project_id: str, statuses: list[str] | None = None,
                      analysis_types: list[str] | None = None) -> None:
        raise NotImplementedError

    def update_project(self, project_id: str, floorplan_url: str) -> None:
        raise NotImplementedError

    def fetch_project(self, project_id: str, on_loaded: Callable[[dict, list[dict]], None]) -> None:
        """Fetch project metadata and cameras, then call on_loaded(project, cameras)."""
        raise NotImplementedError

    def upload_floorplan(self, file_path: str, on_uploaded: Callable[[str], None]) -> None:
        """Upload a floor plan image and report the URL the server stores it under."""
        raise NotImplementedError

    def fetch_bytes(self, url: str, on_loaded: Callable[[bytes], None]) -> None:
        """Download a file served by the repository, e.g. an uploaded floor plan."""
        raise NotImplementedError


class HttpCameraRepository(CameraRepository):
    """Camera repository talking to the survey REST API."""

    def __init__(self, api_base: str, parent: QtCore.QObject | None = None) -> None:
        """Initialize the HTTP repository.

        Args:
            api_base: Server root URL.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self.api_base = api_base
        self._manager = QtNetwork.QNetworkAccessManager(self)

    def resolve_url(self, url: str) -> str:
        """Make a server-relative URL such as '/uploads/plan.png' absolute."""
        base = QtCore.QUrl(self.api_base.rstrip('/') + '/')
        return base.resolved(QtCore.QUrl(url)).toString()

    def _request(self, url: str) -> QtNetwork.QNetworkRequest:
        request = QtNetwork.QNetworkRequest(QtCore.QUrl(url))
        request.setHeader(QtNetwork.QNetworkRequest.KnownHeaders.ContentTypeHeader, "application/json")
        return request

    def _send(self, method: str, url: str, payload: Any = None,
              on_reply: Callable[[Any], None] | None = None) -> None:
        """Send a request and route its reply.

        Args:
            method: One of GET, POST, PUT, DELETE.
            url: Target URL.
            payload: JSON-serializable body for POST/PUT.
            on_reply: Optional callback receiving the decoded reply body.
        """
        request = self._request(url)
        if method == 'GET':
            reply = self._manager.get(request)
        elif method == 'POST':
            reply = self._manager.post(request, QtCore.QByteArray(encode_json(payload)))
        elif method == 'PUT':
            reply = self._manager.put(request, QtCore.QByteArray(encode_json(payload)))
        elif method == 'DELETE':
            reply = self._manager.deleteResource(request)
        else:
            raise ValueError(f"Unsupported method '{method}'")

        self._track(reply, f"{method} {url}", on_reply)

    def _track(self, reply: QtNetwork.QNetworkReply, description: str,
               on_reply: Callable[[Any], None] | None, decode: bool = True) -> None:
        logger.debug("Sending %s", description)
        reply.finished.connect(lambda: self._on_finished(reply, description, on_reply, decode))

    def _on_finished(self, reply: QtNetwork.QNetworkReply, description: str,
                     on_reply: Callable[[Any], None] | None, decode: bool = True) -> None:
        """Route a finished reply to its callback.

        Args:
            reply: Finished network reply, scheduled for deletion here.
            description: Request description used in logs and failure signals.
            on_reply: Callback receiving the body, None to ignore it.
            decode: True to decode the body as JSON, False to pass raw bytes.
        """
        try:
            if reply.error() != QtNetwork.QNetworkReply.NetworkError.NoError:
                logger.warning("Request failed: %s (%s)", description, reply.errorString())
                self.request_failed.emit(description)
                return
            if on_reply is None:
                return
            body = bytes(reply.readAll().data())
            if not decode:
                on_reply(body)
                return
            try:
                data = decode_json(body)
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning("Invalid reply to %s: %s", description, e)
                self.request_failed.emit(description)
                return
            on_reply(data)
        finally:
            reply.deleteLater()

    def create_camera(self, project_id: str, payload: dict, on_created: Callable[[str], None]) -> None:
        def handle(data: Any) -> None:
            if not isinstance(data, dict) or data.get('id') is None:
                logger.warning("Camera creation reply has no id: %r", data)
                return
            on_created(str(data['id']))

        self._send('POST', api_url(self.api_base, 'projects', project_id, 'cameras'), payload, handle)

    def update_camera(self, remote_id: str, payload: dict) -> None:
        self._send('PUT', api_url(self.api_base, 'cameras', remote_id), payload)

    def delete_camera(self, remote_id: str) -> None:
        self._send('DELETE', api_url(self.api_base, 'cameras', remote_id))

    def update_config(self, project_id: str, statuses: list[str] | None = None,
                      analysis_types: list[str] | None = None) -> None:
        payload = {}
        if statuses is not None:
            payload['statuses'] = list(statuses)
        if analysis_types is not None:
            payload['analysisTypes'] = list(analysis_types)
        self._send('PUT', api_url(self.api_base, 'projects', project_id, 'config'), payload)

    def update_project(self, project_id: str, floorplan_url: str) -> None:
        self._send('PUT', api_url(self.api_base, 'projects', project_id), {'floorplanUrl': floorplan_url})

    def fetch_project(self, project_id: str, on_loaded: Callable[[dict, list[dict]], None]) -> None:
        def handle_project(project: Any) -> None:
            if not isinstance(project, dict):
                logger.warning("Unexpected project reply: %r", project)
                return

            def handle_cameras(cameras: Any) -> None:
                on_loaded(project, cameras if isinstance(cameras, list) else [])

            self._send('GET', api_url(self.api_base, 'projects', project_id, 'cameras'),
                       on_reply=handle_cameras)

        self._send('GET', api_url(self.api_base, 'projects', project_id), on_reply=handle_project)

    def upload_floorplan(self, file_path: str, on_uploaded: Callable[[str], None]) -> None:
        """Upload a floor plan as multipart form data to /api/upload.

        Args:
            file_path: Local image file.
            on_uploaded: Callback receiving the server URL of the stored file.
        """
        url = api_url(self.api_base, 'upload')
        description = f"POST {url} ({os.path.basename(file_path)})"

        file = QtCore.QFile(file_path)
        if not file.open(QtCore.QIODevice.OpenModeFlag.ReadOnly):
            logger.warning("Cannot read floor plan %s: %s", file_path, file.errorString())
            self.request_failed.emit(description)
            return

        multi_part = QtNetwork.QHttpMultiPart(QtNetwork.QHttpMultiPart.ContentType.FormDataType)
        file_part = QtNetwork.QHttpPart()
        mime_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
        file_part.setHeader(QtNetwork.QNetworkRequest.KnownHeaders.ContentTypeHeader, mime_type)
        file_part.setHeader(
            QtNetwork.QNetworkRequest.KnownHeaders.ContentDispositionHeader,
            f'form-data; name="file"; filename="{os.path.basename(file_path)}"'
        )
        file_part.setBodyDevice(file)
        file.setParent(multi_part)
        multi_part.append(file_part)

        reply = self._manager.post(QtNetwork.QNetworkRequest(QtCore.QUrl(url)), multi_part)
        multi_part.setParent(reply)

        def handle(data: Any) -> None:
            if not isinstance(data, dict) or not data.get('url'):
                logger.warning("Upload reply has no url: %r", data)
                self.request_failed.emit(description)
                return
            on_uploaded(str(data['url']))

        self._track(reply, description, handle)

    def fetch_bytes(self, url: str, on_loaded: Callable[[bytes], None]) -> None:
        absolute = self.resolve_url(url)
        reply = self._manager.get(QtNetwork.QNetworkRequest(QtCore.QUrl(absolute)))
        self._track(reply, f"GET {absolute}", on_loaded, decode=False)
