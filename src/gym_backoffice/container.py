from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional, Union

from .attendance.ledger import AttendanceLedger
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.sweeper import EndOfDaySweeper
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.repository import ClientRepository
from .clients.service import ClientService
from .common.clock import Clock, SystemClock
from .core.constants import DEFAULT_CUTOFF_TIME
from .database.connection import DBConfig, DatabaseConnection
from .identifiers.allocator import IdentifierAllocator
from .identifiers.mysql_identifier_repository import MySQLIdentifierRepository
from .identifiers.repository import IdentifierRepository
from .importer.csv_import import ClientImporter
from .memberships.mysql_membership_repository import MySQLMembershipPlanRepository
from .memberships.repository import MembershipPlanRepository
from .memberships.service import MembershipService


@dataclass(frozen=True)
class Container:
    clock: Clock

    clients_repo: ClientRepository
    plans_repo: MembershipPlanRepository
    attendance_repo: AttendanceRepository
    identifiers_repo: IdentifierRepository

    allocator: IdentifierAllocator
    sweeper: EndOfDaySweeper
    membership_service: MembershipService
    client_service: ClientService
    attendance_service: AttendanceService
    client_importer: ClientImporter

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    clients_repo: ClientRepository,
    plans_repo: MembershipPlanRepository,
    attendance_repo: AttendanceRepository,
    identifiers_repo: IdentifierRepository,
    clock: Optional[Clock] = None,
    cutoff_time: Union[str, time] = DEFAULT_CUTOFF_TIME,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire the services over any set of repositories."""

    clock = clock or SystemClock()

    allocator = IdentifierAllocator(identifiers_repo)
    sweeper = EndOfDaySweeper(attendance_repo, clock, cutoff_time=cutoff_time)
    membership_service = MembershipService(plans_repo, allocator, clock)
    client_service = ClientService(clients_repo, membership_service, allocator, clock)
    attendance_service = AttendanceService(
        attendance_repo,
        AttendanceLedger(attendance_repo, clock),
        sweeper,
        client_service,
    )

    return Container(
        clock=clock,
        clients_repo=clients_repo,
        plans_repo=plans_repo,
        attendance_repo=attendance_repo,
        identifiers_repo=identifiers_repo,
        allocator=allocator,
        sweeper=sweeper,
        membership_service=membership_service,
        client_service=client_service,
        attendance_service=attendance_service,
        client_importer=ClientImporter(client_service, membership_service),
        conn=conn,
    )


def build_container(*, db_config: dict, cutoff_time: Union[str, time] = DEFAULT_CUTOFF_TIME) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        clients_repo=MySQLClientRepository(conn),
        plans_repo=MySQLMembershipPlanRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        identifiers_repo=MySQLIdentifierRepository(conn),
        cutoff_time=cutoff_time,
        conn=conn,
    )
