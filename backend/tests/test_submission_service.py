import pytest

from risk_tracker.exceptions import (
    Unauthenticated, UserNotFound, ValidationError, GatewayUnavailable, PredictionUnavailable, PersistenceFailed
)
from risk_tracker.models.prediction import RiskLevel
from risk_tracker.models.user import TokenData
from risk_tracker.services.submission_service import SubmissionService
from tests.fakes import FakeGateway, FakeStore, SCENARIO_INPUT, make_user


@pytest.fixture
def owner():
    return make_user()


@pytest.fixture
def identity(owner):
    return TokenData(user_id=owner.id, email=owner.email, role="user")


def build(store, gateway=None):
    jobs = []
    service = SubmissionService(store, gateway or FakeGateway(), dispatch_followup=jobs.append)
    return service, jobs


def test_scenario_selects_model_a_and_classifies_high(owner, identity):
    store = FakeStore(user=owner)
    service, jobs = build(store)

    result = service.submit(identity, SCENARIO_INPUT)

    assert result.outcome.model_name == "modelA"
    assert result.assessment.risk_level == RiskLevel.HIGH
    assert result.response.model_dump(by_alias=True, mode="json") == {
        "prediction": True,
        "precentage": 82.0,
        "riskLevel": "High",
        "recommendation": "Consult a doctor and undergo further medical checkups.",
    }
    assert result.patient_id == store.records[0].id


def test_missing_identity_fails_before_any_store_read(owner):
    store = FakeStore(user=owner)
    gateway = FakeGateway()
    service, jobs = build(store, gateway)

    with pytest.raises(Unauthenticated):
        service.submit(None, SCENARIO_INPUT)

    assert store.lookups == []
    assert gateway.calls == []


def test_unknown_user_is_distinct_from_unauthenticated(identity):
    store = FakeStore(user=None)
    gateway = FakeGateway()
    service, jobs = build(store, gateway)

    with pytest.raises(UserNotFound):
        service.submit(identity, SCENARIO_INPUT)

    assert store.lookups == [identity.user_id]
    assert gateway.calls == []


def test_validation_error_stops_before_gateway(owner, identity):
    data = dict(SCENARIO_INPUT)
    del data["age"]
    store = FakeStore(user=owner)
    gateway = FakeGateway()
    service, jobs = build(store, gateway)

    with pytest.raises(ValidationError) as exc_info:
        service.submit(identity, data)

    assert exc_info.value.field == "age"
    assert gateway.calls == []
    assert store.records == []
    assert jobs == []


def test_recorded_name_is_always_the_owner_profile_name(owner, identity):
    store = FakeStore(user=owner)
    gateway = FakeGateway()
    service, jobs = build(store, gateway)

    service.submit(identity, dict(SCENARIO_INPUT, name="Somebody Else"))

    assert gateway.calls[0].name == owner.name
    assert gateway.calls[0].user_id == owner.id
    assert store.records[0].name == owner.name
    assert jobs[0].patient_name == owner.name


def test_gateway_failure_persists_nothing(owner, identity):
    store = FakeStore(user=owner)
    service, jobs = build(store, FakeGateway(error=GatewayUnavailable("Prediction service timed out")))

    with pytest.raises(PredictionUnavailable):
        service.submit(identity, SCENARIO_INPUT)

    assert store.records == []
    assert jobs == []


def test_persistence_failure_surfaces_and_dispatches_no_followup(owner, identity):
    store = FakeStore(user=owner, fail_persist=True)
    gateway = FakeGateway()
    service, jobs = build(store, gateway)

    with pytest.raises(PersistenceFailed):
        service.submit(identity, SCENARIO_INPUT)

    assert len(gateway.calls) == 1
    assert jobs == []


def test_empty_gateway_answer_uses_floor(owner, identity):
    store = FakeStore(user=owner)
    service, jobs = build(store, FakeGateway(results={}))

    result = service.submit(identity, SCENARIO_INPUT)

    assert result.response.prediction is False
    assert result.response.confidence_percentage == 0.0
    assert result.response.risk_level == RiskLevel.LOW


def test_one_followup_job_per_submission(owner, identity):
    store = FakeStore(user=owner)
    service, jobs = build(store)

    service.submit(identity, SCENARIO_INPUT)

    assert len(jobs) == 1
    job = jobs[0]
    assert job.patient_id == store.records[0].id
    assert job.owner_email == owner.email
    assert job.risk_level == "High"
    assert job.prediction is True
    assert job.notification_message == "New prediction for Dana Owner: High risk"
