"""
Business logic for users.

``UserService`` implements account creation, update, deletion,
listing and login on top of the JSON ``RecordStore``.  Every operation
re‑reads the users document; mutations run inside
``RecordStore.transaction`` so concurrent requests cannot lose each
other's changes.

Passwords are stored and compared in plain text.  Do not reuse this
scheme for anything that matters.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as SchemaError

from ..core.config import settings
from ..core.exceptions import (
    DuplicateLoginError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from ..core.storage import RecordStore
from ..schemas.user import Role, UserCreate, UserPublic, UserRecord, UserUpdate


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DASHBOARDS: Dict[str, str] = {
    Role.DIRECTOR.value: "/director",
    Role.SPECIALIST.value: "/specialist",
    Role.EMPLOYEE.value: "/employee",
    Role.ADMIN.value: "/admin",
}


def decoded_avatar_size(avatar: Optional[str]) -> int:
    """Return the byte size of the image embedded in ``avatar``.

    Accepts a bare base64 string or a ``data:<mime>;base64,<payload>``
    URL.  The size is computed from the payload length without decoding.
    """
    if not avatar:
        return 0
    payload = avatar.split(",", 1)[1] if avatar.startswith("data:") and "," in avatar else avatar
    payload = "".join(payload.split())
    padding = len(payload) - len(payload.rstrip("="))
    return max(len(payload) * 3 // 4 - padding, 0)


def dashboard_for(role: Optional[str]) -> str:
    """Landing route for a role; unknown roles land on the home page."""
    return DASHBOARDS.get(role or "", "/")


def _now_iso() -> str:
    # Millisecond precision with a "Z" suffix, e.g. 2025-01-31T09:15:02.417Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UserService:
    """Сервис для работы с пользователями.

    Хранит пользователей в JSON‑документе ``RecordStore`` и
    предоставляет операции создания, изменения, удаления, просмотра и
    входа по логину и паролю.
    """

    def __init__(self, store: RecordStore, unique_login_on_update: Optional[bool] = None) -> None:
        self.store = store
        if unique_login_on_update is None:
            unique_login_on_update = settings.unique_login_on_update
        self.unique_login_on_update = unique_login_on_update

    @staticmethod
    def _check_avatar(avatar: Optional[str]) -> None:
        if avatar and decoded_avatar_size(avatar) > settings.avatar_max_bytes:
            raise ValidationError("Avatar image must not exceed 2 MB")

    @staticmethod
    def _find_index(records: List[UserRecord], user_id: str) -> int:
        for index, record in enumerate(records):
            if record.id == user_id:
                return index
        raise UserNotFoundError(user_id)

    async def authenticate(self, login: Optional[str], password: Optional[str]) -> UserPublic:
        """Return the account matching ``login`` and ``password``.

        The result never carries the password.  Raises
        ``ValidationError`` when either value is empty and
        ``InvalidCredentialsError`` when no record matches.
        """
        logger = logging.getLogger(__name__)
        if not login or not password:
            raise ValidationError("Login and password are required")
        for record in self.store.load():
            if record.login == login and record.password == password:
                return UserPublic.from_record(record)
        logger.info("Failed login attempt for %s", login)
        raise InvalidCredentialsError()

    async def create_user(self, data: UserCreate) -> UserRecord:
        """Create a new account and return the stored record.

        All of role, login, password, first and last name are required,
        the login must look like an e‑mail address and the role must be
        one of ``Role``.  Raises ``ValidationError`` on bad input and
        ``DuplicateLoginError`` if the login is taken.  The returned
        record includes the password.
        """
        logger = logging.getLogger(__name__)
        if not (data.role and data.login and data.password and data.first_name and data.last_name):
            raise ValidationError("All fields are required")
        if not EMAIL_RE.match(data.login):
            raise ValidationError("Enter a valid email address")
        if data.role not in DASHBOARDS:
            raise ValidationError(f"Unknown role '{data.role}'")
        self._check_avatar(data.avatar)

        with self.store.transaction() as records:
            if any(record.login == data.login for record in records):
                raise DuplicateLoginError(data.login)
            fields = dict(
                id=f"user_{uuid.uuid4().hex}",
                role=data.role,
                login=data.login,
                password=data.password,
                first_name=data.first_name,
                last_name=data.last_name,
                avatar=data.avatar or None,
                created_at=_now_iso(),
            )
            if data.department is not None:
                fields["department"] = data.department
            record = UserRecord(**fields)
            records.append(record)
        logger.info("Created user %s (%s) with role %s", record.id, record.login, record.role)
        return record

    async def update_user(self, user_id: str, data: UserUpdate) -> UserRecord:
        """Merge the supplied fields into an existing record.

        Only fields present in the request are changed; ``id`` and
        ``createdAt`` are never touched.  A supplied avatar is checked
        against the size ceiling.  Raises ``UserNotFoundError`` for an
        unknown id.  Login uniqueness is only enforced when the service
        was created with ``unique_login_on_update``.
        """
        logger = logging.getLogger(__name__)
        changes = data.model_dump(by_alias=True, exclude_unset=True)
        self._check_avatar(changes.get("avatar"))

        with self.store.transaction() as records:
            index = self._find_index(records, user_id)
            current = records[index]
            new_login = changes.get("login")
            if self.unique_login_on_update and new_login and new_login != current.login:
                if any(r.login == new_login for r in records if r.id != user_id):
                    raise DuplicateLoginError(new_login)
            merged = current.to_document()
            merged.update(changes)
            merged["id"] = current.id
            merged["createdAt"] = current.created_at
            try:
                updated = UserRecord.model_validate(merged)
            except SchemaError as exc:
                names = ", ".join(sorted({str(err["loc"][0]) for err in exc.errors()}))
                raise ValidationError(f"Invalid value for: {names}") from exc
            records[index] = updated
        logger.info("Updated user %s: %s", user_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    async def delete_user(self, user_id: str) -> UserRecord:
        """Remove a record and return it.  Raises ``UserNotFoundError``."""
        logger = logging.getLogger(__name__)
        with self.store.transaction() as records:
            index = self._find_index(records, user_id)
            removed = records.pop(index)
        logger.info("Deleted user %s (%s)", removed.id, removed.login)
        return removed

    async def get_user(self, user_id: str) -> UserRecord:
        """Retrieve a record by id.  Raises ``UserNotFoundError``."""
        records = self.store.load()
        return records[self._find_index(records, user_id)]

    async def list_users(self) -> List[UserRecord]:
        """Return every record, passwords included, in stored order."""
        return self.store.load()

    @staticmethod
    def filter_users(
        records: Iterable[UserRecord],
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[UserRecord]:
        """Filter records the way the admin table does.

        ``role`` must match exactly; ``search`` is a case‑insensitive
        substring of the first name, last name or login.
        """
        needle = search.lower() if search else None
        result = []
        for record in records:
            if role and record.role != role:
                continue
            if needle and not any(
                needle in value.lower() for value in (record.first_name, record.last_name, record.login)
            ):
                continue
            result.append(record)
        return result
