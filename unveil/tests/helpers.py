import httpx

HOST_ID = "11111111-1111-1111-1111-111111111111"
GUEST_USER_ID = "22222222-2222-2222-2222-222222222222"
OTHER_USER_ID = "33333333-3333-3333-3333-333333333333"
EVENT_ID = "eeeeeeee-eeee-eeee-eeee-eeeeeeeeeeee"

HOST_TOKEN = "host-token"
GUEST_TOKEN = "guest-token"
OTHER_TOKEN = "other-token"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TwilioRecorder:
    """MockTransport handler that accepts every message unless told to fail a number"""

    def __init__(self):
        self.requests = []
        self.failing_numbers = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        form = dict(httpx.QueryParams(request.content.decode()))
        self.requests.append(form)
        if form.get("To") in self.failing_numbers:
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})
        return httpx.Response(201, json={"sid": f"SM{len(self.requests):032d}", "status": "queued"})

    @property
    def bodies(self):
        return [r["Body"] for r in self.requests]

    @property
    def recipients(self):
        return [r["To"] for r in self.requests]
