"""
Tests for the live notification channel.
"""

import asyncio

import pytest
from starlette.websockets import WebSocketDisconnect

from coursedesk.api.v1.endpoints import ws
from coursedesk.api.v1.endpoints.auth import resolve_session
from coursedesk.api.v1.endpoints.ws import handshake_user
from coursedesk.core.config import settings
from coursedesk.tests.conftest import (
    create_assignment_via_api, create_course_via_api, enroll_via_api, register,
)


def connect(websocket, user):
    websocket.send_json({"type": "auth", "userId": user.id, "token": user.token})
    return websocket.receive_json()


class TestHandshake:

    def test_ignores_other_frames(self):
        assert handshake_user({"type": "ping"}) == (None, None)
        assert handshake_user({"type": "auth"}) == (None, None)
        assert handshake_user({"type": "auth", "userId": 42}) == (None, None)

    def test_rejects_missing_token(self, monkeypatch):
        monkeypatch.setattr(settings, "WS_VERIFY_SESSION", True)
        user_id, error = handshake_user({"type": "auth", "userId": "u1"})
        assert user_id is None
        assert error

    def test_self_declared_when_verification_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "WS_VERIFY_SESSION", False)
        assert handshake_user({"type": "auth", "userId": "u1"}) == ("u1", None)


class TestLiveChannel:

    def test_connected_ack(self, client):
        student = register(client, "Sue Student", "student")

        with client.websocket_connect("/ws") as websocket:
            assert connect(websocket, student) == {"type": "connected", "userId": student.id}
            assert client.app.state.connections.get(student.id) is not None

    def test_malformed_frames_are_ignored(self, client):
        student = register(client, "Sue Student", "student")

        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("not json")
            websocket.send_json(["not", "an", "object"])
            websocket.send_json({"type": "ping"})
            assert connect(websocket, student)["type"] == "connected"

    def test_token_for_another_user_is_rejected(self, client):
        student = register(client, "Sue Student", "student")
        teacher = register(client, "Tom Teacher", "teacher")

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "auth", "userId": teacher.id, "token": student.token})
            reply = websocket.receive_json()
            assert reply["type"] == "error"
            with pytest.raises(WebSocketDisconnect) as exc_info:
                websocket.receive_json()
            assert exc_info.value.code == 1008

        assert client.app.state.connections.get(teacher.id) is None

    def test_session_lookup_runs_off_the_event_loop(self, client, monkeypatch):
        student = register(client, "Sue Student", "student")
        on_loop = []

        def lookup(token):
            try:
                asyncio.get_running_loop()
                on_loop.append(True)
            except RuntimeError:
                on_loop.append(False)
            return resolve_session(token)

        monkeypatch.setattr(ws, "resolve_session", lookup)

        with client.websocket_connect("/ws") as websocket:
            assert connect(websocket, student)["type"] == "connected"

        assert on_loop == [False]

    def test_logged_out_token_is_rejected(self, client):
        student = register(client, "Sue Student", "student")
        client.post("/api/v1/auth/logout", headers=student.headers)

        with client.websocket_connect("/ws") as websocket:
            assert connect(websocket, student)["type"] == "error"

    def test_enrollment_pushes_notification(self, client):
        teacher = register(client, "Tom Teacher", "teacher")
        student = register(client, "Sue Student", "student")
        course = create_course_via_api(client, teacher, "Intro")

        with client.websocket_connect("/ws") as websocket:
            connect(websocket, student)
            assert enroll_via_api(client, student, course["id"]).status_code == 200

            message = websocket.receive_json()

        assert message["type"] == "notification"
        assert message["data"]["type"] == "Enrollment"
        assert message["data"]["userId"] == student.id
        assert message["data"]["content"] == "You've been enrolled in Intro"
        assert message["data"]["isRead"] is False

        # The pushed notification is the persisted one
        listed = client.get("/api/v1/notifications", headers=student.headers).json()
        assert [n["id"] for n in listed] == [message["data"]["id"]]

    def test_submission_and_grade_push_to_the_right_user(self, client):
        teacher = register(client, "Tom Teacher", "teacher")
        student = register(client, "Sue Student", "student")
        course = create_course_via_api(client, teacher, "Intro")
        enroll_via_api(client, student, course["id"])
        assignment = create_assignment_via_api(client, teacher, course["id"], "Essay")

        with client.websocket_connect("/ws") as teacher_socket:
            connect(teacher_socket, teacher)
            submission = client.post("/api/v1/submissions", headers=student.headers, json={
                "assignmentId": assignment["id"], "content": "answer",
            }).json()
            pushed = teacher_socket.receive_json()
        assert pushed["data"]["type"] == "Submission"
        assert pushed["data"]["content"] == "New submission for Essay"

        with client.websocket_connect("/ws") as student_socket:
            connect(student_socket, student)
            client.post("/api/v1/grades", headers=teacher.headers, json={
                "submissionId": submission["id"], "grade": 87, "feedback": "Good",
            })
            pushed = student_socket.receive_json()
        assert pushed["data"]["type"] == "Grade"
        assert pushed["data"]["content"] == 'Your assignment "Essay" has been graded: 87/100'
