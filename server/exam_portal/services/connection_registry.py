"""
Connection Registry: which live connections belong to teachers.
"""
import enum
import logging
from typing import Dict, FrozenSet, Union

logger = logging.getLogger(__name__)


class ConnectionRole(str, enum.Enum):
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    UNKNOWN = "UNKNOWN"


REGISTRABLE_ROLES = (ConnectionRole.TEACHER, ConnectionRole.STUDENT)


def parse_role(role: Union[str, ConnectionRole, None]) -> ConnectionRole:
    """Exactly "TEACHER" or "STUDENT"; anything else, including other casings, is UNKNOWN."""
    if isinstance(role, ConnectionRole):
        return role if role in REGISTRABLE_ROLES else ConnectionRole.UNKNOWN
    if isinstance(role, str):
        try:
            parsed = ConnectionRole(role)
        except ValueError:
            return ConnectionRole.UNKNOWN
        return parsed if parsed in REGISTRABLE_ROLES else ConnectionRole.UNKNOWN
    return ConnectionRole.UNKNOWN


class ConnectionRegistry:
    """
    Maps connection ids to their role for the lifetime of the process.

    Only this object mutates the mapping. All methods are synchronous, so on a
    single event loop every call is atomic with respect to the others.
    """

    def __init__(self):
        self._roles: Dict[str, ConnectionRole] = {}

    def connect(self, connection_id: str) -> None:
        """Track a freshly accepted connection; its role is unknown until registered."""
        self._roles.setdefault(connection_id, ConnectionRole.UNKNOWN)

    def register(self, connection_id: str, role: Union[str, ConnectionRole, None]) -> ConnectionRole:
        """Set or overwrite the role of a connection. Returns the role actually stored."""
        parsed = parse_role(role)
        self._roles[connection_id] = parsed
        if parsed is ConnectionRole.TEACHER:
            logger.info(f"👨‍🏫 Teacher registered: {connection_id}")
        elif parsed is ConnectionRole.STUDENT:
            logger.info(f"🎓 Student registered: {connection_id}")
        else:
            logger.warning(f"Ignoring unsupported role {role!r} for {connection_id}")
        return parsed

    def unregister(self, connection_id: str) -> None:
        self._roles.pop(connection_id, None)

    def role_of(self, connection_id: str) -> ConnectionRole:
        return self._roles.get(connection_id, ConnectionRole.UNKNOWN)

    def teacher_connections(self) -> FrozenSet[str]:
        """Point-in-time snapshot of the connection ids registered as TEACHER."""
        return frozenset(
            cid for cid, role in self._roles.items() if role is ConnectionRole.TEACHER
        )

    def __len__(self) -> int:
        return len(self._roles)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._roles
