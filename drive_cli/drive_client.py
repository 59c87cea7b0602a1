"""HTTP client for communicating with the drive API."""

import mimetypes
import os
import time
import uuid
from pathlib import Path
from typing import Optional, Tuple

import httpx

from drive_cli.config import Config
from drive_cli.constants import DOWNLOADS_DIR
from drive_cli.utils import format_file_rows, format_file_size, format_table, format_usage
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = 'application/octet-stream'


class DriveClient:
    """HTTP client for the drive API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize drive client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        self.sleep = time.sleep
        logger.info(f"Initialized DriveClient [base_url={config.get_base_url()}]")

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, headers=headers, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )
                    return response

                # POSTs are not replayed; an upload 502 carries a per-file report
                if response.status_code >= 500 and attempt < max_retries and method != 'POST':
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    self.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    self.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        if last_exception is not None:
            raise ConnectionError("Cannot connect to the drive API. Is it running?")
        raise ConnectionError("Max retries exceeded")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('error', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            error_data = {}
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        if code == 'INVALID_FILE':
            rejected = [
                f"  {item.get('name')}: {', '.join(item.get('reasons', []))}"
                for item in error_data.get('details') or []
            ]
            return "\n".join(["Some files were rejected:"] + rejected)

        if code == 'QUOTA_EXCEEDED' and 'limit' in error_data:
            return (
                "Storage quota exceeded: "
                f"{format_file_size(error_data.get('currentUsage', 0))} used, "
                f"{format_file_size(error_data.get('requested', 0))} requested, "
                f"limit {format_file_size(error_data['limit'])}."
            )

        error_messages = {
            'AUTH_REQUIRED': 'Not authenticated. Please run: login <username> <password>',
            'USER_ALREADY_EXISTS': 'Username already taken. Try logging in or choose a different username.',
            'INVALID_CREDENTIALS': 'Invalid username or password.',
            'NOT_FOUND': 'Not found.',
            'FILE_TRASHED': 'File is in the trash. Restore it first.',
            'FOLDER_NOT_EMPTY': 'Folder is not empty. Use --policy cascade or --policy orphan.',
            'QUOTA_EXCEEDED': 'Storage quota exceeded. Please delete some files.',
            'TOO_MANY_FILES': detail,
            'VALIDATION_ERROR': detail,
            'OBJECT_STORE_UNAVAILABLE': 'Storage is currently unavailable. Please try again later.',
            'OBJECT_STORE_ERROR': 'Storage error. Please try again later.',
        }

        if code in error_messages:
            return error_messages[code]

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            403: 'Access forbidden',
            404: 'Not found',
            409: 'Conflict',
            410: 'Gone',
            413: 'Storage quota exceeded',
            500: 'Server error',
            502: 'Storage error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with API key.

        Raises:
            ValueError: If no API key is configured
        """
        api_key = self.config.get_api_key()
        if not api_key:
            raise ValueError("Not logged in. Please run: login <username> <password>")
        return {'Authorization': f'Bearer {api_key}'}

    def _authed(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        headers = self._get_auth_header()
        headers.update(kwargs.pop('headers', None) or {})
        return self._request_with_retry(method, endpoint, headers=headers, **kwargs)

    def register(self, username: str, password: str) -> str:
        """
        Register a new user account and store its API key.
        """
        logger.info(f"Attempting to register user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/auth/register',
                json={'username': username, 'password': password}
            )

            if response.status_code == 201:
                data = response.json()
                self.config.set_api_key(data['apiKey'])
                logger.info(f"Registration successful for user: {username} [user_id={data['userId']}]")
                return f"Registration successful!\nUser ID: {data['userId']}\nAPI key saved to config."

            logger.warning(f"Registration failed for user: {username} status={response.status_code}")
            return f"Registration failed: {self._format_error(response)}"

        except ConnectionError as e:
            logger.error(f"Connection error during registration: {e}")
            return f"Error: {e}"

    def login(self, username: str, password: str) -> str:
        """
        Login and store the freshly issued API key.
        """
        logger.info(f"Attempting to login user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/auth/login',
                json={'username': username, 'password': password}
            )

            if response.status_code == 200:
                self.config.set_api_key(response.json()['apiKey'])
                logger.info(f"Login successful for user: {username}")
                return "Login successful!\nAPI key updated in config."

            logger.warning(f"Login failed for user: {username} status={response.status_code}")
            return f"Login failed: {self._format_error(response)}"

        except ConnectionError as e:
            logger.error(f"Connection error during login: {e}")
            return f"Error: {e}"

    def upload(self, file_paths: list, folder_id: Optional[int] = None) -> str:
        """
        Upload local files in one batch.

        Missing or unreadable paths are reported without contacting the server;
        the remaining files are sent together.

        Returns:
            Formatted result with one line per file
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        results = []
        parts = []
        for file_path in file_paths:
            path = Path(file_path).expanduser()
            if not path.is_file():
                results.append(f"Error: File not found: {file_path}")
                continue
            mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
            try:
                parts.append(('files', (path.name, path.read_bytes(), mime_type)))
            except OSError as e:
                results.append(f"Error: Cannot read {file_path}: {e}")

        if not parts:
            return "\n".join(results) if results else "Error: No files to upload"

        data = {}
        if folder_id is not None:
            data['folderId'] = str(folder_id)

        logger.info(f"Uploading {len(parts)} files [folder_id={folder_id}]")
        try:
            response = self._request_with_retry('POST', '/files', headers=headers, files=parts, data=data)
        except ConnectionError as e:
            logger.error(f"Connection error during upload: {e}")
            return f"Error: {e}"

        if response.status_code in (200, 207, 502):
            try:
                body = response.json()
            except ValueError:
                return f"Upload failed: {self._format_error(response)}"
            if 'uploadedFiles' in body:
                for f in body['uploadedFiles']:
                    results.append(f"Uploaded {f['name']} ({format_file_size(f['size'])}) [id={f['id']}]")
                for err in body.get('errors', []):
                    results.append(f"Error: {err['name']}: {err['error']}")
                summary = {'success': 'Upload complete', 'partial': 'Upload partially failed', 'failed': 'Upload failed'}
                results.append(summary.get(body.get('status'), 'Upload finished'))
                return "\n".join(results)

        results.append(f"Upload failed: {self._format_error(response)}")
        return "\n".join(results)

    def list_files(
        self,
        view: str = 'my-drive',
        folder_id: Optional[int] = None,
        page: int = 1,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        search: Optional[str] = None,
    ) -> str:
        """
        List one page of a view, or of search results when search is set.
        """
        params = {'view': view, 'page': page}
        if folder_id is not None:
            params['folderId'] = folder_id
        if limit is not None:
            params['limit'] = limit
        if sort_by:
            params['sortBy'] = sort_by
        if sort_order:
            params['sortOrder'] = sort_order
        if search:
            params['search'] = search

        try:
            response = self._authed('GET', '/files', params=params)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        files = data['files']
        pagination = data['pagination']
        if data.get('searchQuery'):
            title = f"Search results for '{data['searchQuery']}'"
        else:
            title = f"View: {data['view']}"

        footer = (
            f"Page {pagination['page']} of {max(pagination['totalPages'], 1)} "
            f"({pagination['totalCount']} files)"
        )
        if not files:
            return f"{title}\nNo files found.\n{footer}"
        return f"{title}\n{format_file_rows(files)}\n{footer}"

    def search(self, query: str, page: int = 1, limit: Optional[int] = None) -> str:
        return self.list_files(view='search', page=page, limit=limit, search=query)

    def list_folders(self, parent_id: Optional[int] = None) -> str:
        params = {'parentId': parent_id} if parent_id is not None else {}
        try:
            response = self._authed('GET', '/folders', params=params)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        folders = response.json()['folders']
        if not folders:
            return "No folders found."
        rows = [[str(f['id']), f['name']] for f in folders]
        return format_table(["ID", "Name"], rows)

    def create_folder(self, name: str, parent_id: Optional[int] = None) -> str:
        try:
            response = self._authed('POST', '/folders', json={'name': name, 'parentId': parent_id})
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code == 201:
            folder = response.json()
            return f"Created folder {folder['name']} [id={folder['id']}]"
        return f"Error: {self._format_error(response)}"

    def update_file(self, file_id: int, changes: dict, success: str) -> str:
        """
        Apply a partial update to a file (rename, move, star, trash).
        """
        try:
            response = self._authed('PUT', f'/files/{file_id}', json=changes)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code == 200:
            return success.format(**response.json())
        return f"Error: {self._format_error(response)}"

    def delete_file(self, file_id: int) -> str:
        try:
            response = self._authed('DELETE', f'/files/{file_id}')
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code == 200:
            return f"Deleted file {file_id}"
        return f"Error: {self._format_error(response)}"

    def delete_folder(self, folder_id: int, policy: Optional[str] = None) -> str:
        params = {'policy': policy} if policy else {}
        try:
            response = self._authed('DELETE', f'/folders/{folder_id}', params=params)
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        return (
            f"Deleted folder {folder_id} (policy: {data['policy']}; "
            f"{data['deletedFolders']} folders and {data['deletedFiles']} files deleted, "
            f"{data['movedFolders']} folders and {data['movedFiles']} files moved to root)"
        )

    def _download_target(self, output_path: Optional[str], filename: str) -> Tuple[Path, Optional[str]]:
        """
        Resolve where a download is written: downloads/<name> unless a path is given.
        """
        if output_path:
            target = Path(output_path).expanduser()
            if target.is_dir():
                target = target / filename
        else:
            target = Path.cwd() / DOWNLOADS_DIR / os.path.basename(filename)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return target, f"Cannot create directory {target.parent}: {e}"
        return target, None

    def download(self, file_id: int, output_path: Optional[str] = None) -> str:
        """
        Download a file through its signed URL.
        """
        try:
            meta = self._authed('GET', f'/files/{file_id}')
            if meta.status_code != 200:
                return f"Error: {self._format_error(meta)}"
            filename = meta.json()['name']

            signed = self._authed('GET', f'/files/{file_id}/download', params={'redirect': 'false'})
            if signed.status_code != 200:
                return f"Error: {self._format_error(signed)}"

            target, error = self._download_target(output_path, filename)
            if error:
                return f"Error: {error}"

            content = self._request_with_retry('GET', signed.json()['url'])
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if content.status_code != 200:
            return f"Error: {self._format_error(content)}"

        target.write_bytes(content.content)
        logger.info(f"Downloaded file {file_id} to {target}")
        return f"Downloaded {filename} ({format_file_size(len(content.content))}) to {target}"

    def usage(self) -> str:
        try:
            response = self._authed('GET', '/user')
        except (ValueError, ConnectionError) as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        return f"{data['username']}: " + format_usage(
            data['storageUsed'], data['storageTotal'], data['storagePercentage']
        )

    def close(self) -> None:
        self.session.close()
