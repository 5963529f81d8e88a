"""Create the Shaho DynamoDB tables and seed a demo organization.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from datetime import date, datetime, timezone
from typing import Any

import boto3

from shaho.models.application import (
    Application,
    ApplicationCategory,
    ApplicationStatus,
    ApplicationType,
    ApplicationTypeCode,
)
from shaho.models.employee import Employee
from shaho.models.organization import OrganizationConfig, ReminderSettings
from shaho.models.user import User, UserRole
from shaho.persistence.dynamodb_backend import (
    APPLICATIONS_TABLE,
    EMPLOYEE_INDEX,
    EMPLOYEES_TABLE,
    NOTIFICATIONS_TABLE,
    ORGANIZATION_INDEX,
    ORGANIZATIONS_TABLE,
    USERS_TABLE,
    DynamoDBApplicationStore,
    DynamoDBEmployeeStore,
    DynamoDBOrganizationStore,
    DynamoDBUserDirectory,
)

DEMO_ORGANIZATION_ID = "org-demo"

# table name -> GSI hash attributes
TABLE_DEFINITIONS: list[dict[str, Any]] = [
    {"name": APPLICATIONS_TABLE, "indexes": {ORGANIZATION_INDEX: "organizationId"}},
    {"name": EMPLOYEES_TABLE, "indexes": {ORGANIZATION_INDEX: "organizationId"}},
    {"name": ORGANIZATIONS_TABLE, "indexes": {}},
    {"name": NOTIFICATIONS_TABLE, "indexes": {}},
    {"name": USERS_TABLE, "indexes": {ORGANIZATION_INDEX: "organizationId",
                                      EMPLOYEE_INDEX: "employeeId"}},
]

DEMO_APPLICATION_TYPES = [
    ApplicationType(id="type-join", code="JOIN_NOTICE", category=ApplicationCategory.INTERNAL,
                    name="Joining notice"),
    ApplicationType(id="type-acq", code=ApplicationTypeCode.INSURANCE_ACQUISITION,
                    category=ApplicationCategory.EXTERNAL, name="Insurance acquisition"),
    ApplicationType(id="type-loss", code=ApplicationTypeCode.INSURANCE_LOSS,
                    category=ApplicationCategory.EXTERNAL, name="Insurance loss"),
    ApplicationType(id="type-dep", code=ApplicationTypeCode.DEPENDENT_CHANGE_EXTERNAL,
                    category=ApplicationCategory.EXTERNAL, name="Dependent change"),
    ApplicationType(id="type-base", code=ApplicationTypeCode.REWARD_BASE,
                    category=ApplicationCategory.EXTERNAL, name="Standard remuneration base"),
    ApplicationType(id="type-change", code=ApplicationTypeCode.REWARD_CHANGE,
                    category=ApplicationCategory.EXTERNAL, name="Standard remuneration change"),
    ApplicationType(id="type-bonus", code=ApplicationTypeCode.BONUS_PAYMENT,
                    category=ApplicationCategory.EXTERNAL, name="Bonus payment"),
    ApplicationType(id="type-address", code=ApplicationTypeCode.ADDRESS_CHANGE_EXTERNAL,
                    category=ApplicationCategory.EXTERNAL, name="Address change"),
    ApplicationType(id="type-name", code=ApplicationTypeCode.NAME_CHANGE_EXTERNAL,
                    category=ApplicationCategory.EXTERNAL, name="Name change"),
]


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create all Shaho tables. Skips tables that already exist."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for defn in TABLE_DEFINITIONS:
        table_name = f"{defn['name']}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        attributes = {"PK", "SK", *defn["indexes"].values()}
        kwargs: dict[str, Any] = {
            "TableName": table_name,
            "KeySchema": [
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            "AttributeDefinitions": [
                {"AttributeName": name, "AttributeType": "S"} for name in sorted(attributes)
            ],
            "BillingMode": "PAY_PER_REQUEST",
        }
        if defn["indexes"]:
            kwargs["GlobalSecondaryIndexes"] = [
                {
                    "IndexName": index_name,
                    "KeySchema": [{"AttributeName": attribute, "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
                for index_name, attribute in defn["indexes"].items()
            ]
        client.create_table(**kwargs)
        print(f"  Created table {table_name}")


def seed_demo_data(suffix: str = "", region: str = "ap-northeast-1",
                   endpoint_url: str | None = None) -> None:
    """Seed one organization with employees, users and a pending filing."""
    store_kwargs = {"table_suffix": suffix, "region": region, "endpoint_url": endpoint_url}

    DynamoDBOrganizationStore(**store_kwargs).put(OrganizationConfig(
        id=DEMO_ORGANIZATION_ID,
        name="Demo Co., Ltd.",
        application_types=DEMO_APPLICATION_TYPES,
        reminder_settings=ReminderSettings(),
    ))
    print(f"  Seeded organization {DEMO_ORGANIZATION_ID} "
          f"with {len(DEMO_APPLICATION_TYPES)} application types")

    employees = [
        Employee(id="emp-001", organization_id=DEMO_ORGANIZATION_ID, employee_number="001",
                 last_name="Sato", first_name="Hanako", join_date=date(2024, 4, 1)),
        Employee(id="emp-002", organization_id=DEMO_ORGANIZATION_ID, employee_number="002",
                 last_name="Suzuki", first_name="Taro", join_date=date(2015, 4, 1),
                 retirement_date=date(2024, 3, 31)),
    ]
    employee_store = DynamoDBEmployeeStore(**store_kwargs)
    for employee in employees:
        employee_store.put(employee)
    print(f"  Seeded {len(employees)} employees")

    users = [
        User(id="user-admin", organization_id=DEMO_ORGANIZATION_ID, role=UserRole.OWNER),
        User(id="user-001", organization_id=DEMO_ORGANIZATION_ID, role=UserRole.EMPLOYEE,
             employee_id="emp-001"),
    ]
    directory = DynamoDBUserDirectory(**store_kwargs)
    for user in users:
        directory.put(user)
    print(f"  Seeded {len(users)} users")

    DynamoDBApplicationStore(**store_kwargs).put(Application(
        id="app-001",
        type="type-acq",
        category=ApplicationCategory.EXTERNAL,
        employee_id="emp-001",
        organization_id=DEMO_ORGANIZATION_ID,
        status=ApplicationStatus.PENDING,
        data={"insuredPersons": [
            {"acquisitionDate": {"era": "reiwa", "year": "6", "month": "4", "day": "1"}},
        ]},
        created_at=datetime(2024, 4, 2, 9, 0, tzinfo=timezone.utc),
    ))
    print("  Seeded 1 pending application")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create and seed DynamoDB tables for Shaho")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="ap-northeast-1", help="AWS region")
    parser.add_argument("--no-seed", action="store_true", help="Create tables only")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    if not args.no_seed:
        print("Seeding data...")
        seed_demo_data(suffix=args.table_suffix, region=args.region,
                       endpoint_url=args.endpoint_url)

    print("Done!")


if __name__ == "__main__":
    main()
