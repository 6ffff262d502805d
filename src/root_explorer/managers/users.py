"""Thread-safe user records stored in a JSON file (data/users.json).

Each record is ``{"username", "password_hash", "role"}`` keyed by username.
Passwords are hashed with werkzeug.security; records written by older
deployments with a plaintext ``password`` field are still accepted and are
upgraded to a hash on the next successful login.
"""

import json
import logging
import os
import secrets
import sys
import tempfile
import threading

from werkzeug.security import check_password_hash, generate_password_hash

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
    OperationFailedError,
)
from root_explorer.models import Role

logger = logging.getLogger(LOGGER_NAME)

INITIAL_ROOT_USERNAME = "root"


class UserStore:
    """Read/write of the users file. All file I/O is protected by a single lock."""

    def __init__(self, file_path: str) -> None:
        self._file_path = os.path.abspath(file_path)
        self._lock = threading.Lock()

    @property
    def file_path(self) -> str:
        return self._file_path

    def init_db(self, root_password: str | None = None) -> str | None:
        """Create the initial root user if missing.

        Returns the generated password when one had to be generated, else None.
        """
        with self._lock:
            users = self._read(for_update=True)
            if INITIAL_ROOT_USERNAME in users:
                return None
            generated = None
            if not root_password:
                generated = secrets.token_urlsafe(12)
                root_password = generated
            users[INITIAL_ROOT_USERNAME] = {
                "username": INITIAL_ROOT_USERNAME,
                "password_hash": generate_password_hash(root_password),
                "role": Role.ROOT.value,
            }
            self._write(users)
        logger.info("Created initial user %s in %s", INITIAL_ROOT_USERNAME, self._file_path)
        if generated:
            # stderr only; logger records are served by /api/status.
            logger.warning("No initial root password configured; generated one for user %s", INITIAL_ROOT_USERNAME)
            print(f"Initial password for user {INITIAL_ROOT_USERNAME}: {generated}", file=sys.stderr, flush=True)
        return generated

    def get_role(self, username: str) -> Role:
        with self._lock:
            record = self._read().get(username)
        if not record:
            return Role.ANONYMOUS
        return Role.parse(record.get("role"))

    def verify_password(self, username: str, password: str) -> bool:
        with self._lock:
            users = self._read()
            record = users.get(username)
            if not record or not password:
                return False
            stored_hash = record.get("password_hash")
            if stored_hash:
                return check_password_hash(stored_hash, password)
            legacy = record.get("password")
            if legacy is None or not secrets.compare_digest(str(legacy).encode(), password.encode()):
                return False
            record["password_hash"] = generate_password_hash(password)
            record.pop("password", None)
            try:
                self._write(users)
            except OperationFailedError as e:
                logger.warning("Could not upgrade stored password for %s: %s", username, e)
            return True

    def get_user(self, username: str) -> dict:
        with self._lock:
            record = self._read().get(username)
        if not record:
            raise NotFoundError("User not found")
        return {"username": username, "role": record.get("role", "")}

    def list_users(self) -> list[dict]:
        with self._lock:
            users = self._read()
        return [{"username": name, "role": rec.get("role", "")} for name, rec in users.items()]

    def add_user(self, username: str, password: str, role: str) -> None:
        if not username or not password or not role:
            raise InvalidArgumentError("Username, password, and role are required")
        parsed = _require_role(role)
        with self._lock:
            users = self._read(for_update=True)
            if username in users:
                raise AlreadyExistsError(f"User {username} already exists")
            users[username] = {
                "username": username,
                "password_hash": generate_password_hash(password),
                "role": parsed.value,
            }
            self._write(users)
        logger.info("Created user %s (%s)", username, parsed.value)

    def update_user(self, username: str, password: str | None = None, role: str | None = None) -> None:
        parsed = _require_role(role) if role is not None else None
        with self._lock:
            users = self._read(for_update=True)
            record = users.get(username)
            if not record:
                raise NotFoundError(f"User {username} does not exist")
            if password is not None:
                if not password:
                    raise InvalidArgumentError("Password must not be empty")
                record["password_hash"] = generate_password_hash(password)
                record.pop("password", None)
            if parsed is not None:
                record["role"] = parsed.value
            record["username"] = username
            self._write(users)
        logger.info("Updated user %s", username)

    def delete_user(self, username: str) -> None:
        with self._lock:
            users = self._read(for_update=True)
            if username not in users:
                raise NotFoundError(f"User {username} does not exist")
            del users[username]
            self._write(users)
        logger.info("Deleted user %s", username)

    def _read(self, for_update: bool = False) -> dict:
        """Read and parse the JSON file; {} if missing.

        An unreadable or invalid file reads as {} for lookups. With
        ``for_update`` it raises OperationFailedError so the file is never
        replaced by a rewrite that would drop its accounts.
        """
        if not os.path.exists(self._file_path):
            return {}
        try:
            with open(self._file_path, encoding="utf-8") as f:
                out = json.load(f)
            if not isinstance(out, dict):
                raise ValueError("top-level value is not an object")
        except (OSError, ValueError) as e:
            if for_update:
                logger.error("Refusing to rewrite unreadable users file %s: %s", self._file_path, e)
                raise OperationFailedError(f"Users file is unreadable: {e}") from e
            logger.warning("Could not read users file %s: %s", self._file_path, e)
            return {}
        return {k: v for k, v in out.items() if isinstance(v, dict)}

    def _write(self, users: dict) -> None:
        """Write users as JSON atomically; creates parent dir and file if needed."""
        parent = os.path.dirname(self._file_path)
        try:
            os.makedirs(parent, exist_ok=True)
            tmp_fd = tempfile.NamedTemporaryFile(
                mode="w",
                dir=parent,
                delete=False,
                suffix=".tmp",
                encoding="utf-8",
            )
        except OSError as e:
            raise OperationFailedError(f"Could not write users file: {e}") from e
        tmp_path = tmp_fd.name
        try:
            json.dump(users, tmp_fd, indent=2)
            tmp_fd.close()
            os.replace(tmp_path, self._file_path)
        except OSError as e:
            tmp_fd.close()
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise OperationFailedError(f"Could not write users file: {e}") from e


def _require_role(role: str) -> Role:
    parsed = Role.parse(role)
    if parsed is Role.ANONYMOUS:
        raise InvalidArgumentError("Role must be one of: root, admin, user")
    return parsed
