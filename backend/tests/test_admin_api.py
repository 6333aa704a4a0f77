import io
from datetime import datetime, timedelta

import pandas as pd

from risk_tracker.database import User as UserDB, Patient as PatientDB, Notification as NotificationDB, AuditLog as AuditLogDB
from tests.fakes import SCENARIO_INPUT, auth_headers

PREFIX = "/api/v1"


def submit(client, user, **overrides):
    response = client.post(f"{PREFIX}/predict", json=dict(SCENARIO_INPUT, **overrides), headers=auth_headers(user))
    assert response.status_code == 200
    return response


def test_admin_routes_reject_regular_users(client, user):
    response = client.get(f"{PREFIX}/admin/users", headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json() == {"detail": "Admin access required"}


def test_list_users_with_search(client, admin, user):
    everyone = client.get(f"{PREFIX}/admin/users", headers=auth_headers(admin)).json()
    assert {u["email"] for u in everyone} == {admin.email, user.email}

    found = client.get(f"{PREFIX}/admin/users", params={"search": "dana"}, headers=auth_headers(admin)).json()
    assert [u["email"] for u in found] == [user.email]


def test_list_all_patients(client, admin, user, create_user):
    other = create_user(email="other@example.com", name="Other Person")
    submit(client, user)
    submit(client, other)

    response = client.get(f"{PREFIX}/admin/patients", headers=auth_headers(admin))

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_update_role(client, admin, user, db):
    response = client.put(f"{PREFIX}/admin/users/{user.id}/role", json={"role": "admin"}, headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    assert db.query(AuditLogDB).filter(AuditLogDB.action == "update_user_role").count() == 1


def test_update_role_rejects_unknown_role(client, admin, user):
    response = client.put(f"{PREFIX}/admin/users/{user.id}/role", json={"role": "wizard"}, headers=auth_headers(admin))

    assert response.status_code == 400


def test_admin_cannot_demote_themselves(client, admin):
    response = client.put(f"{PREFIX}/admin/users/{admin.id}/role", json={"role": "user"}, headers=auth_headers(admin))

    assert response.status_code == 400


def test_delete_patient_removes_notifications(client, admin, user, db):
    submit(client, user)
    patient_id = db.query(PatientDB).first().id
    assert db.query(NotificationDB).count() == 1

    response = client.delete(f"{PREFIX}/admin/patients/{patient_id}", headers=auth_headers(admin))

    assert response.status_code == 204
    assert db.query(PatientDB).count() == 0
    assert db.query(NotificationDB).count() == 0


def test_delete_patient_bad_and_unknown_ids(client, admin):
    assert client.delete(f"{PREFIX}/admin/patients/xyz", headers=auth_headers(admin)).status_code == 400
    assert client.delete(f"{PREFIX}/admin/patients/999", headers=auth_headers(admin)).status_code == 404


def test_delete_user_cascades_to_records(client, admin, user, db):
    user_id = user.id
    submit(client, user)
    submit(client, user, Glucose=95)
    client.post(f"{PREFIX}/feedback", json={"message": "hello"}, headers=auth_headers(user))

    response = client.delete(f"{PREFIX}/admin/users/{user_id}", headers=auth_headers(admin))

    assert response.status_code == 204
    db.expire_all()
    assert db.query(UserDB).filter(UserDB.id == user_id).count() == 0
    assert db.query(PatientDB).count() == 0
    assert db.query(NotificationDB).count() == 0


def test_admin_cannot_delete_themselves(client, admin):
    response = client.delete(f"{PREFIX}/admin/users/{admin.id}", headers=auth_headers(admin))

    assert response.status_code == 400


def test_stats(client, admin, user):
    submit(client, user)

    stats = client.get(f"{PREFIX}/admin/stats", headers=auth_headers(admin)).json()

    assert stats["total_users"] == 2
    assert stats["active_users"] == 1
    assert {r["role"]: r["count"] for r in stats["role_distribution"]} == {"admin": 1, "user": 1}


def test_prediction_stats(client, admin, user, gateway):
    submit(client, user)
    gateway.results = {}
    submit(client, user)

    stats = client.get(f"{PREFIX}/admin/prediction-stats", headers=auth_headers(admin)).json()

    assert stats["total_predictions"] == 2
    assert stats["diabetic"] == 1
    assert stats["non_diabetic"] == 1


def test_feedback_listing(client, admin, user):
    client.post(f"{PREFIX}/feedback", json={"message": "Please add charts"}, headers=auth_headers(user))

    feedback = client.get(f"{PREFIX}/admin/feedback", headers=auth_headers(admin)).json()

    assert len(feedback) == 1
    assert feedback[0]["message"] == "Please add charts"
    assert feedback[0]["user_email"] == user.email


def test_export_csv(client, admin, user):
    submit(client, user)

    response = client.get(f"{PREFIX}/admin/export/csv", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="patients_data.csv"' in response.headers["content-disposition"]
    frame = pd.read_csv(io.StringIO(response.text))
    assert list(frame["Name"]) == ["Dana Owner"]
    assert list(frame["Risk Level"]) == ["High"]


def test_export_excel(client, admin, user):
    submit(client, user)

    response = client.get(f"{PREFIX}/admin/export/excel", headers=auth_headers(admin))

    assert response.status_code == 200
    frame = pd.read_excel(io.BytesIO(response.content), sheet_name="Patients")
    assert list(frame["Glucose"]) == [150.0]


def test_export_filters(client, admin, user, gateway):
    submit(client, user)

    non_diabetic = client.get(
        f"{PREFIX}/admin/export/csv", params={"prediction": "non-diabetic"}, headers=auth_headers(admin)
    )
    assert non_diabetic.status_code == 404
    assert non_diabetic.json() == {"detail": "No records found"}

    bad_filter = client.get(f"{PREFIX}/admin/export/csv", params={"prediction": "maybe"}, headers=auth_headers(admin))
    assert bad_filter.status_code == 400

    bad_date = client.get(f"{PREFIX}/admin/export/csv", params={"date_from": "yesterday"}, headers=auth_headers(admin))
    assert bad_date.status_code == 400


def test_export_date_to_includes_the_whole_day(client, admin, user):
    submit(client, user)
    today = datetime.utcnow().date()

    same_day = client.get(
        f"{PREFIX}/admin/export/csv", params={"date_to": today.isoformat()}, headers=auth_headers(admin)
    )
    assert same_day.status_code == 200
    assert list(pd.read_csv(io.StringIO(same_day.text))["Name"]) == ["Dana Owner"]

    day_before = client.get(
        f"{PREFIX}/admin/export/csv",
        params={"date_to": (today - timedelta(days=1)).isoformat()},
        headers=auth_headers(admin),
    )
    assert day_before.status_code == 404


def test_audit_logs_record_admin_actions(client, admin, user):
    submit(client, user)
    client.get(f"{PREFIX}/admin/export/csv", headers=auth_headers(admin))

    logs = client.get(f"{PREFIX}/admin/logs", params={"action": "export_csv"}, headers=auth_headers(admin)).json()

    assert len(logs) == 1
    assert logs[0]["user_email"] == admin.email
