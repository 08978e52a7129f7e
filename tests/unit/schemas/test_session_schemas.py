"""Tests for request/response schemas."""
from datetime import date, time

import pytest
from pydantic import ValidationError

from models.session import SessionStatus
from models.user import User, UserRole
from schemas import CreateSessionRequest, CurrentUserResponse, SessionResponse
from tests.factories import SessionFactory


class TestCreateSessionRequest:
    def test_parses_wall_clock_times(self):
        request = CreateSessionRequest(
            connection_id="c1", title="Algebra", scheduled_date="2030-05-06",
            start_time="10:00", end_time="11:30",
        )

        assert request.scheduled_date == date(2030, 5, 6)
        assert request.start_time == time(10, 0)
        assert request.end_time == time(11, 30)

    def test_seconds_dropped(self):
        request = CreateSessionRequest(
            connection_id="c1", title="Algebra", scheduled_date="2030-05-06",
            start_time="10:00:59", end_time="11:00",
        )

        assert request.start_time == time(10, 0)

    def test_invalid_time(self):
        with pytest.raises(ValidationError):
            CreateSessionRequest(
                connection_id="c1", title="Algebra", scheduled_date="2030-05-06",
                start_time="10am", end_time="11:00",
            )

    def test_title_required(self):
        with pytest.raises(ValidationError):
            CreateSessionRequest(
                connection_id="c1", title="", scheduled_date="2030-05-06",
                start_time="10:00", end_time="11:00",
            )


class TestSessionResponse:
    def test_status_enum_rendered_as_value(self):
        session = SessionFactory(status=SessionStatus.NO_SHOW)

        response = SessionResponse.model_validate(session)

        assert response.status == "no_show"
        assert response.tutor_name is None


class TestCurrentUserResponse:
    def test_role_enum_rendered_as_value(self):
        user = User(id="user_1", name="Tina", role=UserRole.TUTOR)

        response = CurrentUserResponse.model_validate(user)

        assert response.role == "tutor"
        assert response.tutor_profile is None
