import random

from exam_portal.services.connection_registry import ConnectionRegistry, ConnectionRole, parse_role


def test_new_connection_is_unknown_and_not_a_teacher(registry):
    registry.connect("a")
    assert "a" in registry
    assert registry.role_of("a") is ConnectionRole.UNKNOWN
    assert registry.teacher_connections() == frozenset()


def test_register_teacher_and_student(registry):
    registry.register("a", "TEACHER")
    registry.register("b", "STUDENT")
    assert registry.teacher_connections() == {"a"}
    assert registry.role_of("b") is ConnectionRole.STUDENT


def test_register_is_idempotent_and_overwrites(registry):
    registry.register("a", "TEACHER")
    registry.register("a", "TEACHER")
    assert registry.teacher_connections() == {"a"}
    registry.register("a", "STUDENT")
    assert registry.teacher_connections() == frozenset()


def test_unsupported_role_leaves_connection_unregistered(registry):
    assert registry.register("a", "ADMIN") is ConnectionRole.UNKNOWN
    assert registry.register("b", None) is ConnectionRole.UNKNOWN
    assert registry.register("c", "UNKNOWN") is ConnectionRole.UNKNOWN
    assert registry.teacher_connections() == frozenset()


def test_unsupported_role_demotes_a_teacher(registry):
    registry.register("a", "TEACHER")
    registry.register("a", "principal")
    assert registry.teacher_connections() == frozenset()


def test_role_must_match_exactly(registry):
    assert parse_role("TEACHER") is ConnectionRole.TEACHER
    assert parse_role(ConnectionRole.STUDENT) is ConnectionRole.STUDENT
    assert parse_role("teacher") is ConnectionRole.UNKNOWN
    assert parse_role(" TEACHER ") is ConnectionRole.UNKNOWN
    assert parse_role(42) is ConnectionRole.UNKNOWN

    registry.register("lower", "teacher")
    registry.register("padded", " Teacher ")
    assert registry.teacher_connections() == frozenset()


def test_unregister_unknown_id_is_noop(registry):
    registry.unregister("ghost")
    registry.register("a", "TEACHER")
    registry.unregister("a")
    registry.unregister("a")
    assert len(registry) == 0
    assert registry.teacher_connections() == frozenset()


def test_snapshot_is_not_affected_by_later_changes(registry):
    registry.register("a", "TEACHER")
    snapshot = registry.teacher_connections()
    registry.unregister("a")
    registry.register("b", "TEACHER")
    assert snapshot == {"a"}


def test_random_sequences_match_last_registration():
    rng = random.Random(7)
    ids = ["c1", "c2", "c3", "c4"]
    for _ in range(50):
        registry = ConnectionRegistry()
        expected = {}
        for _ in range(30):
            cid = rng.choice(ids)
            if rng.random() < 0.3:
                registry.unregister(cid)
                expected.pop(cid, None)
            else:
                role = rng.choice(["TEACHER", "STUDENT", "bogus"])
                registry.register(cid, role)
                expected[cid] = role
        teachers = {cid for cid, role in expected.items() if role == "TEACHER"}
        assert registry.teacher_connections() == teachers
