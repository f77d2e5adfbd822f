from fastapi import FastAPI, HTTPException, Request
from starlette.datastructures import UploadFile
from pathlib import Path
import json
import os

# Support both local development and Docker
DATA_DIR = Path("/sheet_stub") if os.path.exists("/sheet_stub") else Path(__file__).resolve().parent / "sheet_stub"


class SheetStore:
    """Rows of the client spreadsheet, keyed by row id"""

    def __init__(self, rows=None, users=None):
        self.rows = {}
        self.users = list(users or [])
        self.reports = []
        self.calls = []
        self._next_id = 1
        for row in rows or []:
            self.append(dict(row))

    def append(self, row):
        row_id = row.get("id") or f"row-{self._next_id}"
        self._next_id += 1
        row["id"] = row_id
        self.rows[row_id] = row
        return row_id


async def _form_row(request: Request) -> dict:
    form = await request.form()
    row = {}
    for key, value in form.multi_items():
        # Uploaded photos are stored by filename, like the sheet's file columns
        row[key] = value.filename if isinstance(value, UploadFile) else value
    return row


def create_mock_app(rows=None, users=None, records_shape: str = "json_wrappers") -> FastAPI:
    app = FastAPI(title="Mock Sheet Webhooks", version="1.0.0")
    store = SheetStore(rows, users)
    app.state.store = store

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.get("/records")
    def list_records():
        store.calls.append("list_records")
        rows = list(store.rows.values())
        if records_shape == "json_wrappers":
            return [{"json": row} for row in rows]
        if records_shape == "keyed":
            return {"data": rows}
        return rows

    @app.post("/records/create")
    async def create_record(request: Request):
        store.calls.append("create_record")
        row = await _form_row(request)
        row.pop("rowId", None)
        row["id"] = ""
        return {"status": "success", "id": store.append(row)}

    @app.post("/records/update")
    async def update_record(request: Request):
        store.calls.append("update_record")
        row = await _form_row(request)
        row_id = row.pop("rowId", "")
        if row_id not in store.rows:
            raise HTTPException(status_code=404, detail=f"row {row_id} not found")
        store.rows[row_id].update(row)
        return {"status": "success", "id": row_id}

    @app.post("/records/delete")
    async def delete_record(request: Request):
        store.calls.append("delete_record")
        body = await request.json()
        if store.rows.pop(body.get("id", ""), None) is None:
            raise HTTPException(status_code=404, detail="row not found")
        return {"status": "success"}

    @app.post("/clients/status")
    async def update_status(request: Request):
        store.calls.append("update_status")
        body = await request.json()
        cpf = "".join(ch for ch in str(body.get("cpf", "")) if ch.isdigit())
        updated = 0
        for row in store.rows.values():
            if cpf and "".join(ch for ch in str(row.get("clientCpf", "")) if ch.isdigit()) == cpf:
                row["clientStatus"] = body.get("status")
                updated += 1
        return {"status": "success", "updated": updated}

    @app.get("/users")
    def list_users():
        store.calls.append("list_users")
        return {"data": store.users}

    @app.post("/report")
    async def report(request: Request):
        store.calls.append("report")
        store.reports.append(await request.json())
        return {"status": "success"}

    return app


def _load_stub(name):
    file = DATA_DIR / name
    return json.loads(file.read_text()) if file.exists() else []


app = create_mock_app(rows=_load_stub("records.json"), users=_load_stub("users.json"))
