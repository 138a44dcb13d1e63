"""
Tests for the dict-in / dict-out service.

Every entry point shares one barrier, so submissions, status queries and
admin resets on the same game must observe each other's writes.
"""

import pytest

from tests.helpers.factories import mock_decisions, payload
from topazsim.errors import SessionNotFoundError, ValidationError


def _statuses(response):
    return {c["companyId"]: c["status"] for c in response["companies"]}


class TestSubmitDecisions:
    def test_two_company_quarter(self, service):
        service.join("g1", "c1")
        service.join("g1", "c2")

        first = service.submit_decisions(payload(company_id="c1"))
        status = service.get_status("g1")

        assert first["status"] == "WAITING"
        assert status["allSubmitted"] is False
        assert status["submittedCount"] == 1
        assert status["companies"][0]["submittedAt"] is not None

        second = service.submit_decisions(payload(company_id="c2"))

        assert second["status"] == "COMPLETED"
        assert second["message"] == "Quarter 1 simulation complete!"
        assert second["nextQuarter"] == 2
        assert set(second["results"]) == {"c1", "c2"}
        assert set(_statuses(service.get_status("g1")).values()) == {"PENDING"}

    def test_result_is_plain_data(self, service):
        response = service.submit_decisions(payload())
        result = response["results"]["c1"]
        assert result["quarter"] == 1
        assert isinstance(result["financials"]["revenue"], float)
        assert set(result["units_sold_by_product"]) == {"p1", "p2", "p3"}

    def test_payload_alias(self, service):
        body = payload()
        body["payload"] = body.pop("decisions")
        assert service.submit_decisions(body)["status"] == "COMPLETED"

    @pytest.mark.parametrize("missing", ["gameId", "companyId", "quarter", "decisions"])
    def test_missing_field(self, service, missing):
        body = payload()
        del body[missing]
        with pytest.raises(ValidationError, match=missing):
            service.submit_decisions(body)
        assert service.list_sessions() == []

    def test_lists_every_missing_field(self, service):
        with pytest.raises(ValidationError, match="gameId, companyId, quarter"):
            service.submit_decisions({"decisions": {}})

    def test_body_must_be_mapping(self, service):
        with pytest.raises(ValidationError, match="mapping"):
            service.submit_decisions(["not", "a", "dict"])  # type: ignore[arg-type]

    def test_malformed_decisions(self, service):
        body = payload()
        body["decisions"]["operations"]["shiftLevel"] = 4
        with pytest.raises(ValidationError, match="shiftLevel"):
            service.submit_decisions(body)


class TestSharedVisibility:
    def test_reset_is_seen_by_status_and_submit(self, service):
        for cid in ("a", "b", "c"):
            service.join("g1", cid)
        for cid in ("a", "b", "c"):
            service.submit_decisions(payload(company_id=cid))
        assert service.get_status("g1")["quarter"] == 2

        reset = service.admin_reset("g1")

        assert reset["companiesReset"] == 3
        status = service.get_status("g1")
        assert status["quarter"] == 1
        assert set(_statuses(status).values()) == {"PENDING"}
        # the old quarter number is stale again, the initial one is accepted
        response = service.submit_decisions(payload(company_id="a", quarter=1))
        assert response["status"] == "WAITING"

    def test_submission_is_seen_by_admin_listing(self, service):
        service.join("g1", "a")
        service.join("g1", "b")
        service.submit_decisions(payload(company_id="a"))

        (summary,) = service.list_sessions()
        assert summary == {
            "gameId": "g1",
            "quarter": 1,
            "companyCount": 2,
            "allSubmitted": False,
        }

    def test_company_status(self, service):
        service.join("g1", "a")
        service.join("g1", "b")
        service.lock_company("g1", "a")

        assert service.get_status("g1", "a")["companyStatus"] == "LOCKED"
        assert service.unlock_company("g1", "a")["companyStatus"] == "PENDING"
        assert "companyStatus" not in service.get_status("g1")

    def test_unknown_game_status(self, service):
        status = service.get_status("nope")
        assert status["exists"] is False
        assert status["companies"] == []


class TestCompanyHistory:
    def test_history_grows_each_quarter(self, service):
        for quarter in (1, 2, 3):
            service.submit_decisions(
                payload(quarter=quarter, decisions=mock_decisions(worker_wage=13.5))
            )
        history = service.company_history("g1", "c1")
        assert [row["quarter"] for row in history] == [1, 2, 3]
        assert all(row["morale"] <= 100.0 for row in history)

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.company_history("nope", "c1")

    def test_unknown_company(self, service):
        service.join("g1", "a")
        with pytest.raises(ValidationError):
            service.company_history("g1", "zz")
