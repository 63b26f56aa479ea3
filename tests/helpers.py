"""Small builders and HTTP fakes shared by the tests."""

from family_tree.records import MemberRecord


def member(id, name=None, generation=1, parent_id=None, spouse_id=None, **attrs):
    return MemberRecord(
        id=id,
        name=name or f"Member {id}",
        generation=generation,
        parent_id=parent_id,
        spouse_id=spouse_id,
        **attrs,
    )


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", text=""):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Records calls and returns a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def _call(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._call("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._call("POST", url, **kwargs)
