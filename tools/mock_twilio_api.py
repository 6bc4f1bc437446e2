"""
Lightweight mock of the Twilio Messages API for live async e2e testing.

Point TWILIO_API_BASE_URL at http://<host>:8080/2010-04-01.

Endpoints:
- POST /2010-04-01/Accounts/<sid>/Messages.json -> stores message, returns 201 with a sid
- GET  /_messages                               -> returns every stored message
- POST /_reset                                  -> clears stored messages
- GET  /_health                                 -> returns 200
"""
import json
import uuid
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import List
from urllib.parse import parse_qs


SENT_MESSAGES: List[dict] = []


class Handler(BaseHTTPRequestHandler):
    def _send_json(self, status_code: int, payload) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):  # noqa: N802
        if self.path == "/_health":
            return self._send_json(200, {"status": "ok"})

        if self.path == "/_messages":
            return self._send_json(200, {"messages": SENT_MESSAGES})

        return self._send_json(404, {"error": "not_found"})

    def do_POST(self):  # noqa: N802
        if self.path == "/_reset":
            SENT_MESSAGES.clear()
            return self._send_json(200, {"status": "reset"})

        if self.path.startswith("/2010-04-01/Accounts/") and self.path.endswith("/Messages.json"):
            length = int(self.headers.get("Content-Length", "0"))
            raw = self.rfile.read(length).decode("utf-8") if length else ""
            form = {key: values[0] for key, values in parse_qs(raw).items()}

            if not form.get("To") or not form.get("Body"):
                return self._send_json(400, {"code": 21604, "message": "A 'To' and 'Body' are required"})

            sid = f"SM{uuid.uuid4().hex}"
            SENT_MESSAGES.append({
                "sid": sid,
                "account_sid": self.path.split("/")[3],
                "to": form.get("To"),
                "from": form.get("From"),
                "body": form.get("Body"),
            })
            return self._send_json(201, {"sid": sid, "status": "queued"})

        return self._send_json(404, {"error": "not_found"})

    def log_message(self, format, *args):  # noqa: A003
        # Silence default logging to keep test output clean.
        return


def main() -> None:
    server = HTTPServer(("0.0.0.0", 8080), Handler)
    server.serve_forever()


if __name__ == "__main__":
    main()
