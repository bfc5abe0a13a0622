"""Tests for the requests based API client, using a fake session."""

import json

import requests

from recycle_points_client import RecyclePointsAPI


class FakeSession:
    """Records requests and answers with queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_response(status_code, body=None, url="http://api.test/x"):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return response


def test_list_points_builds_query():
    session = FakeSession(make_response(200, []))
    api = RecyclePointsAPI(base_url="http://api.test/", session=session)

    data, error = api.list_points("Anápolis", "GO", [1, 2], return_items=True)

    assert (data, error) == ([], None)
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "http://api.test/points"
    assert call["params"] == {"city": "Anápolis", "uf": "GO", "items": "1,2", "returnItems": "true"}
    assert "Authorization" not in call["headers"]


def test_create_point_sends_multipart_and_keeps_token():
    created = {"point": {"id": 1}, "token": "abc.def.ghi"}
    session = FakeSession(make_response(200, created), make_response(200, {"point": {}, "items": []}))
    api = RecyclePointsAPI(base_url="http://api.test", session=session)
    image = ("ponto.png", b"\x89PNG", "image/png")

    data, error = api.create_point({"name": "Ponto", "items": [3, 1], "whatsapp": None}, image)

    assert error is None
    assert data == created
    assert api.token == "abc.def.ghi"
    call = session.calls[0]
    assert call["data"] == {"name": "Ponto", "items": "3,1"}
    assert call["files"] == {"image": image}

    api.update_point("a@x.com", {"name": "Outro"})
    call = session.calls[1]
    assert call["method"] == "PUT"
    assert call["data"] == {"name": "Outro", "originalemail": "a@x.com"}
    assert call["files"] is None
    assert call["headers"]["Authorization"] == "Bearer abc.def.ghi"


def test_structured_error_is_returned():
    body = {
        "error": True,
        "message": "Only one point per e-mail permited.",
        "information": {
            "in": "create_point",
            "code": "EMAIL_ALREADY_REGISTERED",
            "message": "Only one point per e-mail permited.",
        },
    }
    session = FakeSession(make_response(400, body))
    api = RecyclePointsAPI(base_url="http://api.test", session=session)

    data, error = api.create_point({"name": "Ponto"}, None)

    assert data is None
    assert error == {
        "status_code": 400,
        "code": "EMAIL_ALREADY_REGISTERED",
        "message": "Only one point per e-mail permited.",
    }
    assert api.token is None


def test_framework_error_detail_is_used_as_message():
    session = FakeSession(make_response(401, {"detail": "Not authenticated"}))
    api = RecyclePointsAPI(base_url="http://api.test", session=session)

    _, error = api.get_point(3)

    assert error["status_code"] == 401
    assert error["code"] is None
    assert error["message"] == "Not authenticated"


def test_connection_error_is_reported():
    session = FakeSession(requests.ConnectionError("refused"))
    api = RecyclePointsAPI(base_url="http://api.test", session=session)

    data, error = api.list_items()

    assert data is None
    assert error == {"status_code": None, "code": None, "message": "refused"}


def test_login_keeps_token():
    session = FakeSession(make_response(200, {"point": {"id": 2}, "token": "t0k"}))
    api = RecyclePointsAPI(base_url="http://api.test", session=session)

    api.login("a@x.com", "s3cret")

    assert api.token == "t0k"
    assert session.calls[0]["json"] == {"email": "a@x.com", "password": "s3cret"}
