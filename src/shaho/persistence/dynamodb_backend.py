"""DynamoDB document stores implementing the engine's collaborator protocols.

Every table uses a generic ``PK``/``SK`` key schema. Tables whose items are
listed per organization carry an ``organization-index`` GSI on
``organizationId``; users additionally carry an ``employee-index`` GSI on
``employeeId``.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from shaho.core.exceptions import CacheError, StoreError
from shaho.core.protocols import ICacheBackend
from shaho.models.application import Application, ApplicationCategory, ApplicationStatus
from shaho.models.employee import Employee
from shaho.models.notification import Notification, NotificationType
from shaho.models.organization import OrganizationConfig
from shaho.models.user import User

logger = logging.getLogger(__name__)

APPLICATIONS_TABLE = "shaho-applications"
EMPLOYEES_TABLE = "shaho-employees"
ORGANIZATIONS_TABLE = "shaho-organizations"
NOTIFICATIONS_TABLE = "shaho-notifications"
USERS_TABLE = "shaho-users"

ORGANIZATION_INDEX = "organization-index"
EMPLOYEE_INDEX = "employee-index"

_KEY_ATTRIBUTES = ("PK", "SK")


def _decode_number(value: Decimal) -> int | float:
    return int(value) if value == int(value) else float(value)


def _decode_decimals(value: Any) -> Any:
    """Convert Decimal values in a DynamoDB item to int/float, recursively."""
    if isinstance(value, Decimal):
        return _decode_number(value)
    if isinstance(value, dict):
        return {k: _decode_decimals(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode_decimals(v) for v in value]
    return value


def _encode_floats(value: Any) -> Any:
    """DynamoDB rejects Python floats; store them as Decimal."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _encode_floats(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode_floats(v) for v in value]
    return value


def _strip_keys(item: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in item.items() if k not in _KEY_ATTRIBUTES}


class _DynamoDBTable:
    """Shared table access: key helpers, pagination and error wrapping."""

    TABLE: str = ""

    def __init__(self, table_suffix: str = "", region: str = "ap-northeast-1",
                 endpoint_url: str | None = None) -> None:
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)
        self._table = self._ddb.Table(f"{self.TABLE}{table_suffix}")

    def _get_item(self, pk: str, sk: str) -> dict[str, Any] | None:
        """Get a single item by PK + SK. Returns None if not found."""
        try:
            resp = self._table.get_item(Key={"PK": pk, "SK": sk})
        except ClientError as exc:
            raise StoreError(f"DynamoDB GET failed on {self._table.name} for {pk}/{sk}: {exc}") from exc
        item = resp.get("Item")
        return _strip_keys(_decode_decimals(item)) if item else None

    def _query(self, **kwargs: Any) -> list[dict[str, Any]]:
        """Run a query, following pagination to the end."""
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = self._table.query(**kwargs)
                items.extend(_strip_keys(_decode_decimals(i)) for i in resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    return items
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as exc:
            raise StoreError(f"DynamoDB QUERY failed on {self._table.name}: {exc}") from exc

    def _query_organization(self, organization_id: str) -> list[dict[str, Any]]:
        return self._query(
            IndexName=ORGANIZATION_INDEX,
            KeyConditionExpression=Key("organizationId").eq(organization_id),
        )

    def _put_item(self, pk: str, sk: str, document: dict[str, Any]) -> None:
        item = {"PK": pk, "SK": sk, **_encode_floats(document)}
        try:
            self._table.put_item(Item=item)
        except ClientError as exc:
            raise StoreError(f"DynamoDB PUT failed on {self._table.name} for {pk}/{sk}: {exc}") from exc


class DynamoDBApplicationStore(_DynamoDBTable):
    """IApplicationStore backed by ``shaho-applications``."""

    TABLE = APPLICATIONS_TABLE
    SK = "APPLICATION"

    @staticmethod
    def _pk(application_id: str) -> str:
        return f"APP#{application_id}"

    def put(self, application: Application) -> str:
        application_id = application.id or str(uuid.uuid4())
        document = application.model_copy(update={"id": application_id}).to_document()
        self._put_item(self._pk(application_id), self.SK, document)
        return application_id

    def get(self, application_id: str) -> Optional[Application]:
        item = self._get_item(self._pk(application_id), self.SK)
        return Application.model_validate(item) if item else None

    def list(
        self,
        organization_id: str,
        *,
        statuses: Optional[Iterable[ApplicationStatus]] = None,
        employee_id: Optional[str] = None,
        category: Optional[ApplicationCategory] = None,
    ) -> list[Application]:
        wanted = {str(s) for s in statuses} if statuses is not None else None
        applications = []
        for item in self._query_organization(organization_id):
            if wanted is not None and item.get("status") not in wanted:
                continue
            if employee_id is not None and item.get("employeeId") != employee_id:
                continue
            if category is not None and item.get("category") != category:
                continue
            applications.append(Application.model_validate(item))
        return applications

    def update(self, application_id: str, fields: dict[str, Any]) -> None:
        fields = {**fields, "updatedAt": datetime.now(timezone.utc).isoformat()}
        names = {f"#f{i}": name for i, name in enumerate(fields)}
        values = {f":v{i}": _encode_floats(value) for i, value in enumerate(fields.values())}
        expression = "SET " + ", ".join(f"#f{i} = :v{i}" for i in range(len(fields)))
        try:
            self._table.update_item(
                Key={"PK": self._pk(application_id), "SK": self.SK},
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ConditionExpression=Attr("PK").exists(),
            )
        except ClientError as exc:
            raise StoreError(f"DynamoDB UPDATE failed for application {application_id!r}: {exc}") from exc


class DynamoDBEmployeeStore(_DynamoDBTable):
    """IEmployeeStore backed by ``shaho-employees``."""

    TABLE = EMPLOYEES_TABLE
    SK = "EMPLOYEE"

    def put(self, employee: Employee) -> None:
        self._put_item(f"EMP#{employee.id}", self.SK, employee.to_document())

    def get(self, employee_id: str) -> Optional[Employee]:
        item = self._get_item(f"EMP#{employee_id}", self.SK)
        return Employee.model_validate(item) if item else None

    def list(self, organization_id: str) -> list[Employee]:
        return [Employee.model_validate(i) for i in self._query_organization(organization_id)]


class DynamoDBOrganizationStore(_DynamoDBTable):
    """IOrganizationStore backed by ``shaho-organizations`` with an optional cache."""

    TABLE = ORGANIZATIONS_TABLE
    SK = "CONFIG"
    CACHE_TTL = 300  # 5 minutes

    def __init__(self, table_suffix: str = "", region: str = "ap-northeast-1",
                 endpoint_url: str | None = None, cache: ICacheBackend | None = None) -> None:
        super().__init__(table_suffix, region, endpoint_url)
        self._cache = cache

    @staticmethod
    def _cache_key(organization_id: str) -> str:
        return f"org_config:{organization_id}"

    def put(self, organization: OrganizationConfig) -> None:
        self._put_item(f"ORG#{organization.id}", self.SK, organization.to_document())
        if self._cache is not None:
            self._cache.delete(self._cache_key(organization.id))

    def get(self, organization_id: str) -> Optional[OrganizationConfig]:
        cache_key = self._cache_key(organization_id)

        # Check cache first; a cache outage falls through to the table
        if self._cache is not None:
            try:
                cached = self._cache.get(cache_key)
            except CacheError:
                logger.warning("Organization cache read failed for %s", organization_id, exc_info=True)
                cached = None
            if cached is not None:
                return OrganizationConfig.model_validate(json.loads(cached))

        item = self._get_item(f"ORG#{organization_id}", self.SK)
        if item is None:
            return None
        config = OrganizationConfig.model_validate(item)

        if self._cache is not None:
            try:
                self._cache.setex(cache_key, self.CACHE_TTL, json.dumps(config.to_document()))
            except CacheError:
                logger.warning("Organization cache write failed for %s", organization_id, exc_info=True)
        return config


class DynamoDBNotificationStore(_DynamoDBTable):
    """INotificationStore backed by ``shaho-notifications``.

    Items are partitioned by recipient and sorted by creation time, so a
    recipient's history comes back newest first.
    """

    TABLE = NOTIFICATIONS_TABLE

    def create(self, notification: Notification) -> str:
        notification_id = notification.id or str(uuid.uuid4())
        document = notification.model_copy(update={"id": notification_id}).to_document()
        sk = f"NTF#{notification.created_at.isoformat()}#{notification_id}"
        self._put_item(f"USER#{notification.user_id}", sk, document)
        return notification_id

    def query(
        self,
        user_id: str,
        organization_id: str,
        *,
        type: Optional[NotificationType] = None,
        application_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Notification]:
        items = self._query(
            KeyConditionExpression=Key("PK").eq(f"USER#{user_id}") & Key("SK").begins_with("NTF#"),
            ScanIndexForward=False,
        )
        found = []
        for item in items:
            if item.get("organizationId") != organization_id:
                continue
            if type is not None and item.get("type") != type:
                continue
            if application_id is not None and item.get("applicationId") != application_id:
                continue
            found.append(Notification.model_validate(item))
            if limit is not None and len(found) >= limit:
                break
        return found


class DynamoDBUserDirectory(_DynamoDBTable):
    """IUserDirectory backed by ``shaho-users``."""

    TABLE = USERS_TABLE
    SK = "PROFILE"

    def put(self, user: User) -> None:
        document = {k: v for k, v in user.to_document().items() if v is not None}
        self._put_item(f"USER#{user.id}", self.SK, document)

    def get_user_id_for_employee(self, employee_id: str) -> Optional[str]:
        items = self._query(
            IndexName=EMPLOYEE_INDEX,
            KeyConditionExpression=Key("employeeId").eq(employee_id),
        )
        for item in items:
            user = User.model_validate(item)
            if user.is_active:
                return user.id
        return None

    def get_admin_user_ids(self, organization_id: str) -> list[str]:
        users = [User.model_validate(i) for i in self._query_organization(organization_id)]
        return [u.id for u in users if u.is_admin and u.is_active]
