"""Edit server: preview and format the markup fields of one content record."""

import http.server
import html
import json
import threading
import urllib.parse

from lessonmark.html_render import to_html
from lessonmark.session import EditSession, markup_fields


def _segment_json(seg) -> dict:
    return {
        "id": seg.id,
        "open_index": seg.open_index,
        "close_index": seg.close_index,
        "text": seg.text,
        "closed": seg.closed,
        "attrs": seg.attrs.to_dict(),
    }


class EditHandler(http.server.BaseHTTPRequestHandler):
    session: EditSession | None = None
    settings: dict = {}
    _save_fn = None

    def log_message(self, format, *args):
        pass

    def _json_response(self, data, status=200):
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _html_response(self, text, status=200):
        body = text.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _error(self, status, msg):
        self._json_response({"error": msg}, status)

    def _read_body(self) -> dict:
        length = int(self.headers.get("Content-Length", 0))
        if length:
            return json.loads(self.rfile.read(length))
        return {}

    def _parse_path(self):
        parsed = urllib.parse.urlparse(self.path)
        return parsed.path, urllib.parse.parse_qs(parsed.query)

    def _accent(self):
        return self.settings.get("accent") or "hsl(var(--primary))"

    def _active_json(self) -> dict:
        registry = self.session.registry
        return {
            "active": registry.active,
            "field": self.session.active_field(),
            "formats": registry.active_formats.to_dict(),
        }

    def _view_or_404(self, path):
        try:
            return self.session.view(path)
        except KeyError:
            self._error(404, f"No markup field: {path}")
            return None

    # ── GET ──────────────────────────────────────────────────────────

    def do_GET(self):
        path, qs = self._parse_path()

        if path == "/":
            sections = []
            for field in markup_fields(self.session.record):
                view = self.session.view(field)
                sections.append(
                    f'<section data-field="{html.escape(field)}">'
                    f'<h3>{html.escape(field)}</h3>'
                    f'{to_html(view.nodes, accent=self._accent())}</section>')
            self._html_response("<!doctype html><html><body>"
                                + "".join(sections) + "</body></html>")

        elif path == "/api/fields":
            self._json_response(markup_fields(self.session.record))

        elif path == "/api/render":
            field = qs.get("field", [None])[0]
            if not field:
                self._error(400, "field is required")
                return
            view = self._view_or_404(field)
            if view is None:
                return
            self._json_response({
                "field": field,
                "content": view.content,
                "html": to_html(view.nodes, accent=self._accent()),
                "segments": [_segment_json(s) for s in view.segments],
            })

        elif path == "/api/active":
            self._json_response(self._active_json())

        else:
            self._error(404, "Not found")

    # ── POST ─────────────────────────────────────────────────────────

    def do_POST(self):
        path, _ = self._parse_path()
        try:
            body = self._read_body()
        except json.JSONDecodeError:
            self._error(400, "Invalid JSON body")
            return
        if not isinstance(body, dict):
            self._error(400, "JSON body must be an object")
            return

        if path == "/api/activate":
            field = body.get("field")
            segment_id = body.get("segment")
            if not field or not segment_id:
                self._error(400, "field and segment are required")
                return
            if self._view_or_404(field) is None:
                return
            if not self.session.activate(field, segment_id):
                self._error(404, f"No segment {segment_id} in {field}")
                return
            self._json_response(self._active_json())

        elif path == "/api/deactivate":
            self.session.registry.set_active(None)
            self._json_response(self._active_json())

        elif path == "/api/format":
            format_type = body.get("type")
            if not format_type:
                self._error(400, "type is required")
                return
            if self.session.registry.active is None:
                self._error(409, "No active segment")
                return
            try:
                changed = self.session.apply_format(format_type, body.get("value"))
            except ValueError as e:
                self._error(400, str(e))
                return
            result = self._active_json()
            result["changed"] = changed
            field = result["field"]
            if field:
                result["content"] = self.session.views[field].content
            self._json_response(result)

        elif path == "/api/save":
            save_fn = EditHandler._save_fn
            if save_fn is None:
                self._error(409, "Saving is not configured")
                return
            try:
                save_fn(self.session.record)
            except OSError as e:
                self._error(500, str(e))
                return
            self.session.mark_saved()
            self._json_response({"ok": True})

        else:
            self._error(404, "Not found")


def start_edit_server(session, settings, save_fn=None):
    port = settings.get("edit_port", 8795)
    EditHandler.session = session
    EditHandler.settings = settings
    EditHandler._save_fn = save_fn

    server = http.server.HTTPServer(("127.0.0.1", port), EditHandler)
    server.allow_reuse_address = True
    url = f"http://127.0.0.1:{port}"
    print(f"lessonmark running at {url}")
    print("Press Ctrl+C to stop")

    try:
        import webbrowser
        threading.Timer(0.5, lambda: webbrowser.open(url)).start()
    except Exception:
        pass

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.")
    finally:
        server.server_close()
        session.close_all()
