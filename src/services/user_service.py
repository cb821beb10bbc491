"""
Flat-file user record store.

Owns the JSON backing file and every read/write of it. Each call reloads
the whole file; each mutation rewrites it. There is no locking: concurrent
mutations race and the last write wins.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from common.exceptions import (
    MalformedRecordError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
    format_errors,
)
from common.logging import get_logger
from common.models import User, UserCreate, UserUpdate

logger = get_logger(__name__)

T = TypeVar("T")


class UserService:
    """File-backed CRUD over user records."""

    def __init__(self, data_file_path: Path):
        """Initialize the store, creating an empty backing file if needed."""
        self.data_file_path = Path(data_file_path)
        self._ensure_data_file()

    def _ensure_data_file(self) -> None:
        """Ensure the backing file exists."""
        if self.data_file_path.exists():
            return

        logger.info(
            event="user_data_file_created",
            message="Creating empty user data file",
            path=str(self.data_file_path),
        )
        try:
            self.data_file_path.parent.mkdir(parents=True, exist_ok=True)
            self.data_file_path.write_text("[]\n", encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(f"Failed to create data file {self.data_file_path}: {e}") from e

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        """Run blocking file I/O in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _read_records(self) -> List[Any]:
        try:
            raw = self.data_file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(f"Failed to read users from {self.data_file_path}: {e}") from e

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Failed to parse users file: {e}") from e

        if not isinstance(records, list):
            raise StorageReadError("Users file must contain a JSON array")
        return records

    def _write_users(self, users: List[User]) -> None:
        payload = json.dumps([user.to_record() for user in users], indent=2)
        try:
            self.data_file_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(f"Failed to write users to {self.data_file_path}: {e}") from e

    async def list_users(self) -> List[User]:
        """
        Read every stored user.

        Raises:
            StorageReadError: If the file cannot be read or parsed
            MalformedRecordError: If any stored record is malformed
        """
        logger.debug(event="fetching_all_users")

        try:
            records = await self._run(self._read_records)
            users = []
            for index, record in enumerate(records):
                try:
                    users.append(User.model_validate(record))
                except PydanticValidationError as e:
                    raise MalformedRecordError(
                        f"Stored user at index {index} is malformed", format_errors(e)
                    ) from e
        except StorageReadError as e:
            logger.error(event="fetch_users_failed", error=str(e))
            raise

        logger.info(event="users_retrieved", count=len(users))
        return users

    async def get_user(self, user_id: int) -> Optional[User]:
        """Find a user by id. Returns None when absent."""
        logger.debug(event="fetching_user", user_id=user_id)

        users = await self.list_users()
        for user in users:
            if user.id == user_id:
                logger.info(event="user_retrieved", user_id=user_id, name=user.name)
                return user

        logger.warning(event="user_not_found", user_id=user_id)
        return None

    async def create_user(self, data: Union[UserCreate, Dict[str, Any]]) -> User:
        """
        Validate and append a new user with id max(existing) + 1.

        Raises:
            ValidationError: If data fails the create schema (nothing is written)
            StorageWriteError: If the file cannot be rewritten
        """
        logger.debug(event="creating_user", user_data=_as_dict(data))

        try:
            validated = _validate_create(data)
            users = await self.list_users()
            new_id = max([user.id for user in users] + [0]) + 1

            new_user = User(id=new_id, **validated.model_dump())
            users.append(new_user)
            await self._run(self._write_users, users)
        except (ValidationError, StorageReadError, StorageWriteError) as e:
            logger.error(event="create_user_failed", user_data=_as_dict(data), error=str(e))
            raise

        logger.info(event="user_created", user_id=new_id, name=new_user.name)
        return new_user

    async def update_user(
        self, user_id: int, data: Union[UserUpdate, Dict[str, Any]]
    ) -> Optional[User]:
        """
        Merge the supplied fields onto an existing user.

        Returns None (without validating data) when the id is absent.
        """
        logger.debug(event="updating_user", user_id=user_id, user_data=_as_dict(data))

        try:
            users = await self.list_users()
            index = _find_index(users, user_id)
            if index is None:
                logger.warning(event="user_not_found_for_update", user_id=user_id)
                return None

            changes = _validate_update(data).changes()
            # Re-validate the merged record so a stored user is always well formed
            try:
                users[index] = User.model_validate({**users[index].to_record(), **changes})
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic("Invalid user data", e) from e
            await self._run(self._write_users, users)
        except (ValidationError, StorageReadError, StorageWriteError) as e:
            logger.error(
                event="update_user_failed",
                user_id=user_id,
                user_data=_as_dict(data),
                error=str(e),
            )
            raise

        logger.info(event="user_updated", user_id=user_id, fields=sorted(changes))
        return users[index]

    async def delete_user(self, user_id: int) -> bool:
        """Remove a user. Returns whether a record was removed."""
        logger.debug(event="deleting_user", user_id=user_id)

        try:
            users = await self.list_users()
            index = _find_index(users, user_id)
            if index is None:
                logger.warning(event="user_not_found_for_deletion", user_id=user_id)
                return False

            deleted = users.pop(index)
            await self._run(self._write_users, users)
        except (ValidationError, StorageReadError, StorageWriteError) as e:
            logger.error(event="delete_user_failed", user_id=user_id, error=str(e))
            raise

        logger.info(event="user_deleted", user_id=user_id, name=deleted.name)
        return True


def _find_index(users: List[User], user_id: int) -> Optional[int]:
    for index, user in enumerate(users):
        if user.id == user_id:
            return index
    return None


def _as_dict(data: Union[UserCreate, UserUpdate, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, (UserCreate, UserUpdate)):
        return data.model_dump(exclude_unset=True, mode="json")
    return dict(data)


def _validate_create(data: Union[UserCreate, Dict[str, Any]]) -> UserCreate:
    if isinstance(data, UserCreate):
        return data
    try:
        return UserCreate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic("Invalid user data", e) from e


def _validate_update(data: Union[UserUpdate, Dict[str, Any]]) -> UserUpdate:
    if isinstance(data, UserUpdate):
        return data
    try:
        return UserUpdate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic("Invalid user data", e) from e
