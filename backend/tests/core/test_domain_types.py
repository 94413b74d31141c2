"""Domain Types — identifier helpers, bounds and enum values.

Tests:
    - new_id mints distinct identifiers within the length limit
    - Enums serialize to the wire strings the client uses
    - Errors carry the HTTP status and recoverability they map to
"""

from app.core.domain_types import (
    new_id, MAX_ID_LENGTH, QueryKind, DesireCategory, IdentityPolicy,
)
from app.core.errors import (
    InputValidationError, ResourceNotFoundError, ConflictError,
    DatabaseError, RemoteSyncError, ErrorContext,
)


def test_new_id_is_unique_and_bounded():
    ids = {new_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) <= MAX_ID_LENGTH for i in ids)


def test_enum_wire_values():
    assert {k.value for k in QueryKind} == {"general", "partial", "parallel"}
    assert {c.value for c in DesireCategory} == {"self", "target", "third-party"}
    assert len(IdentityPolicy) == 2


def test_error_statuses():
    assert InputValidationError("bad", "field").http_status == 400
    assert ResourceNotFoundError("Project", "p1").http_status == 404
    assert ConflictError("taken").http_status == 409
    assert DatabaseError("down", "commit").http_status == 503


def test_only_infrastructure_errors_are_recoverable():
    assert RemoteSyncError("offline").recoverable
    assert DatabaseError("down", "commit").recoverable
    assert not ResourceNotFoundError("Project", "p1").recoverable


def test_error_response_envelope():
    err = ConflictError("taken", ErrorContext(project_id="p1", collection="candidates"))
    body = err.to_response()["error"]
    assert body["code"] == "CONFLICT"
    assert body["context"] == {
        "project_id": "p1", "user_id": None, "collection": "candidates",
    }
